"""Interactive multiple-choice quizzes served to chat assistants over MCP."""

__all__ = ["__version__"]

__version__ = "1.0.0"
