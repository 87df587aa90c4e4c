"""Conversation category registry."""

from .categories import (
    CONVERSATION_CATEGORIES,
    ConversationCategory,
    get_category,
    load_categories,
    parse_categories,
)

__all__ = [
    "CONVERSATION_CATEGORIES",
    "ConversationCategory",
    "get_category",
    "load_categories",
    "parse_categories",
]
