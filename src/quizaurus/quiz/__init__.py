from .bridge import (
    FollowUpRequest,
    HostBridge,
    LoggingBridge,
    WidgetStateUpdate,
    dispatch,
    drain_notifications,
)
from .errors import (
    IllegalTransitionError,
    InvalidAnswerIndexError,
    MalformedQuestionError,
    NoQuestionsError,
    QuizError,
)
from .models import (
    AT_LEAST_TWO,
    EXACTLY_FOUR,
    OptionPolicy,
    Question,
    QuestionSet,
    ScoreSummary,
)
from .runner import QuizRunner, RunnerState
from .scoring import score
from .session import QuizSessionResult, run_quiz_session
from .validator import (
    ValidationReport,
    load_question_set,
    validate_question,
    validate_questions,
)

__all__ = [
    "FollowUpRequest",
    "HostBridge",
    "LoggingBridge",
    "WidgetStateUpdate",
    "dispatch",
    "drain_notifications",
    "IllegalTransitionError",
    "InvalidAnswerIndexError",
    "MalformedQuestionError",
    "NoQuestionsError",
    "QuizError",
    "AT_LEAST_TWO",
    "EXACTLY_FOUR",
    "OptionPolicy",
    "Question",
    "QuestionSet",
    "ScoreSummary",
    "QuizRunner",
    "RunnerState",
    "score",
    "QuizSessionResult",
    "run_quiz_session",
    "ValidationReport",
    "load_question_set",
    "validate_question",
    "validate_questions",
]
