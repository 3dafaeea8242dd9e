from .quiz import QuestionView, QuizApp, ResultsView

__all__ = ["QuizApp", "QuestionView", "ResultsView"]
