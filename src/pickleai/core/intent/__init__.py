"""Intent classification and follow-up selection."""

from .classifier import MessageAnalysis, analyze_user_message, find_missing_info
from .follow_up import MAX_FOLLOW_UP_QUESTIONS, generate_follow_up_questions
from .slots import has_context_info

__all__ = [
    "MAX_FOLLOW_UP_QUESTIONS",
    "MessageAnalysis",
    "analyze_user_message",
    "find_missing_info",
    "generate_follow_up_questions",
    "has_context_info",
]
