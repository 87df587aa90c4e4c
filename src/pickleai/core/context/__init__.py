"""User context model and rule-based extraction."""

from .extractor import extract_context_from_message, find_player_lookup
from .models import Location, UserContext, merge_context

__all__ = [
    "Location",
    "UserContext",
    "extract_context_from_message",
    "find_player_lookup",
    "merge_context",
]
