"""Keyword-scoring intent classifier.

Every registered category scores the sum of the lengths of its keywords
found in the lowercased message, so long specific phrases ("what paddle")
outweigh short generic ones ("paddle").  The strictly highest non-zero
score wins.  On an exact tie the category registered first keeps the
lead.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from pydantic import BaseModel, Field

from pickleai.core.context.models import UserContext
from pickleai.core.knowledge import ConversationCategory, load_categories

from .slots import has_context_info

logger = logging.getLogger(__name__)

MAX_OPTIONAL_SLOTS = 2
CONFIDENCE_SCALE = 10


class MessageAnalysis(BaseModel):
    """Classifier verdict for one message."""

    category: str | None = Field(default=None, description="Winning category key")
    missing_info: list[str] = Field(
        default_factory=list, description="Slots still worth asking about"
    )
    confidence: float = Field(
        default=0.0,
        description="min(score / 10, 1); a relative strength, not a probability",
    )
    score: int = Field(default=0, description="Raw keyword score of the winner")


def score_category(category: ConversationCategory, lowered_message: str) -> int:
    return sum(
        len(keyword)
        for keyword in category.keywords
        if keyword.lower() in lowered_message
    )


def find_missing_info(
    category: ConversationCategory, context: UserContext, message: str
) -> list[str]:
    """Required slots not yet satisfied, else up to two unsatisfied optional ones."""
    missing = [
        slot
        for slot in category.required_info
        if not has_context_info(context, slot, message)
    ]
    if missing:
        return missing
    return [
        slot
        for slot in category.optional_info[:MAX_OPTIONAL_SLOTS]
        if not has_context_info(context, slot, message)
    ]


def analyze_user_message(
    message: str,
    context: UserContext | None = None,
    categories: Mapping[str, ConversationCategory] | None = None,
) -> MessageAnalysis:
    """Pick the best category for ``message`` and list what is still missing."""
    if context is None:
        context = UserContext()
    if categories is None:
        categories = load_categories()

    lowered = message.lower()
    best_key: str | None = None
    best_score = 0
    for key, category in categories.items():
        score = score_category(category, lowered)
        # Strict inequality: earlier registration wins exact ties.
        if score > best_score:
            best_key, best_score = key, score

    if best_key is None:
        return MessageAnalysis()

    missing = find_missing_info(categories[best_key], context, lowered)
    confidence = min(best_score / CONFIDENCE_SCALE, 1.0)
    logger.debug(
        "Classified message as %s (score=%d, missing=%s)",
        best_key,
        best_score,
        missing,
    )
    return MessageAnalysis(
        category=best_key,
        missing_info=missing,
        confidence=confidence,
        score=best_score,
    )
