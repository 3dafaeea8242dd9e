"""Follow-up prompts sent to the host assistant after a quiz."""

from __future__ import annotations

import json
from collections.abc import Sequence
from textwrap import dedent

__all__ = ["MORE_QUESTIONS_PROMPT", "build_review_prompt"]

MORE_QUESTIONS_PROMPT = (
    "Generate another quiz with new questions on the same topic."
)

_REVIEW_TEMPLATE = dedent(
    """
    The user has completed a quiz. Below is a JSON array containing the
    sequence of questions. Each item has the question itself, the correct
    answer and the user's answer.
    Looking at that array, give the user feedback for each question.
    If the user's answer matches the correct answer, keep it minimalistic and
    concise. If the user's answer doesn't match the correct answer, provide a
    short explanation, including some information that helps understand and
    memorize the answer.

    Don't mention any technical details about response indices, tool output
    or widget state in the response.

    {results}
    """
).strip()


def build_review_prompt(items: Sequence[dict[str, object]]) -> str:
    """Render the review request for ``items``.

    Each item carries ``question``, ``correctOption`` and ``selectedOption``
    (``None`` when the question was not answered).
    """

    results = json.dumps(list(items), ensure_ascii=False)
    return _REVIEW_TEMPLATE.format(results=results)
