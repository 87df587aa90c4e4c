"""System prompt composition for the downstream language model."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

from pickleai.core.context.models import Location, UserContext
from pickleai.core.knowledge import ConversationCategory, load_categories

from .templates import (
    BASE_PROMPT,
    CATEGORY_GUIDANCE,
    CONTEXT_LABELS,
    CONTEXT_PROMPT_FOOTER,
    GENERIC_INSTRUCTIONS,
    INTELLIGENT_PROMPT,
    NO_KNOWN_CONTEXT,
    PICKLEBALL_SYSTEM_PROMPT,
)


def generic_system_prompt() -> str:
    return f"{BASE_PROMPT}\n\n{GENERIC_INSTRUCTIONS}"


def _render_value(value: Any) -> str:
    if isinstance(value, BaseModel):
        return json.dumps(value.model_dump(by_alias=True, exclude_none=True))
    if isinstance(value, dict):
        return json.dumps(value)
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    return str(value)


def format_known_context(context: UserContext) -> str:
    """Bulleted ``key: value`` lines for every known field."""
    lines = [
        f"• {key}: {_render_value(value)}"
        for key, value in context.known_fields().items()
    ]
    return "\n".join(lines) or NO_KNOWN_CONTEXT


def category_guidance(category: str) -> str:
    return CATEGORY_GUIDANCE.get(category, "")


def generate_intelligent_system_prompt(
    category: str | None,
    missing_info: list[str],
    context: UserContext,
    follow_up_questions: list[str],
    categories: Mapping[str, ConversationCategory] | None = None,
) -> str:
    """Category-aware prompt asking for the missing details.

    Falls back to the short generic prompt when there is no category or
    nothing left to ask.
    """
    if categories is None:
        categories = load_categories()
    entry = categories.get(category) if category else None
    if entry is None or not missing_info:
        return generic_system_prompt()

    prompt = INTELLIGENT_PROMPT.format(
        base=BASE_PROMPT,
        topic=entry.name,
        questions="\n".join(f"• {q}" for q in follow_up_questions),
        known_context=format_known_context(context),
        guidance=category_guidance(entry.key),
    )
    return prompt.rstrip()


def _format_location(location: Location) -> str:
    place = ", ".join(part for part in (location.city, location.state) if part)
    if location.zip_code:
        place = f"{place} {location.zip_code}".strip()
    if not place and location.coordinates:
        place = f"{location.coordinates.lat}, {location.coordinates.lng}"
    return place


def _context_line(key: str, value: Any) -> str:
    label = CONTEXT_LABELS.get(key, key)
    if isinstance(value, Location):
        rendered = _format_location(value)
    elif key in ("travelDistance", "datePreference"):
        rendered = str(value).replace("_", " ")
    else:
        rendered = _render_value(value)
    return f"{label}: {rendered}"


def build_context_prompt(context: UserContext) -> str:
    """Full persona prompt with a ``USER CONTEXT`` block of known fields."""
    known = context.known_fields()
    if not known:
        return PICKLEBALL_SYSTEM_PROMPT

    lines = "\n".join(_context_line(key, value) for key, value in known.items())
    return f"{PICKLEBALL_SYSTEM_PROMPT}\n\nUSER CONTEXT:\n{lines}\n\n{CONTEXT_PROMPT_FOOTER}"
