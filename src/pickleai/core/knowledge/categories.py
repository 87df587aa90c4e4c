"""Topic knowledge base: the registry of conversation categories.

The table itself is data (``categories.yaml`` next to this module).  It
is validated once into frozen ``ConversationCategory`` models; mapping
order in the file is the registration order the classifier relies on.
"""

from __future__ import annotations

import functools
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

import yaml
from pydantic import BaseModel, ConfigDict, Field

CATEGORIES_FILE = Path(__file__).with_name("categories.yaml")


class ConversationCategory(BaseModel):
    """One topical bucket the assistant can specialise its questioning on."""

    model_config = ConfigDict(frozen=True)

    key: str = Field(..., description="Registry key, e.g. 'paddleRecommendation'")
    name: str = Field(..., description="Display name used in prompts")
    keywords: tuple[str, ...] = Field(
        ..., description="Substrings that vote for this category"
    )
    required_info: tuple[str, ...] = Field(
        default=(), description="Slots that must be known before answering"
    )
    optional_info: tuple[str, ...] = Field(
        default=(), description="Slots worth asking about once required ones are known"
    )
    follow_up_questions: Mapping[str, tuple[str, ...]] = Field(
        default_factory=dict, description="Candidate questions per slot"
    )
    resources: tuple[str, ...] = Field(
        default=(), description="External reference URLs"
    )

    def questions_for(self, slot: str) -> tuple[str, ...]:
        return self.follow_up_questions.get(slot, ())


def parse_categories(raw: Mapping[str, dict]) -> dict[str, ConversationCategory]:
    """Validate a raw ``{key: fields}`` mapping, preserving its order."""
    return {
        key: ConversationCategory.model_validate({"key": key, **fields})
        for key, fields in raw.items()
    }


@functools.cache
def load_categories(
    path: Path = CATEGORIES_FILE,
) -> Mapping[str, ConversationCategory]:
    """Load and validate the category table (cached per path)."""
    with open(path, encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    return MappingProxyType(parse_categories(raw))


def get_category(key: str | None) -> ConversationCategory | None:
    if key is None:
        return None
    return load_categories().get(key)


CONVERSATION_CATEGORIES = load_categories()
