"""Score summaries for completed quiz passes."""

from __future__ import annotations

from .errors import NoQuestionsError
from .models import ScoreSummary

__all__ = [
    "ENCOURAGEMENT_TIERS",
    "FALLBACK_ENCOURAGEMENT",
    "encouragement_for",
    "score",
]

# Evaluated top-down; the first threshold met wins.
ENCOURAGEMENT_TIERS: tuple[tuple[float, str], ...] = (
    (0.9, "Excellent!"),
    (0.7, "Good job!"),
    (0.5, "Not bad!"),
)
FALLBACK_ENCOURAGEMENT = "Keep practicing!"


def encouragement_for(success_rate: float) -> str:
    for threshold, message in ENCOURAGEMENT_TIERS:
        if success_rate >= threshold:
            return message
    return FALLBACK_ENCOURAGEMENT


def score(correct_count: int, total_count: int) -> ScoreSummary:
    """Compute the success rate and encouragement for a finished quiz.

    ``total_count`` must be positive and ``correct_count`` within
    ``0..total_count``.
    """

    if total_count <= 0:
        raise NoQuestionsError("Cannot score a quiz without questions.")
    if not (0 <= correct_count <= total_count):
        raise ValueError(
            f"correct_count must be between 0 and {total_count}, "
            f"got {correct_count}"
        )
    success_rate = correct_count / total_count
    return ScoreSummary(
        correct_count=correct_count,
        total_count=total_count,
        success_rate=success_rate,
        encouragement=encouragement_for(success_rate),
    )
