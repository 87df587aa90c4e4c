"""Follow-up question selection."""

from __future__ import annotations

from collections.abc import Mapping

from pickleai.core.context.models import UserContext
from pickleai.core.knowledge import ConversationCategory, load_categories
from pickleai.infra.random_source import RandomSource, default_random_source

MAX_FOLLOW_UP_QUESTIONS = 2


def generate_follow_up_questions(
    category: str | None,
    missing_info: list[str],
    context: UserContext | None = None,
    *,
    rng: RandomSource | None = None,
    limit: int = MAX_FOLLOW_UP_QUESTIONS,
    categories: Mapping[str, ConversationCategory] | None = None,
) -> list[str]:
    """One random question for each of the first ``limit`` missing slots.

    Slots without registered questions are skipped, so fewer than
    ``limit`` questions may come back.  ``limit`` never exceeds two.
    """
    if categories is None:
        categories = load_categories()
    entry = categories.get(category) if category else None
    if entry is None:
        return []
    if rng is None:
        rng = default_random_source()

    questions: list[str] = []
    for slot in missing_info[: min(limit, MAX_FOLLOW_UP_QUESTIONS)]:
        options = entry.questions_for(slot)
        if options:
            questions.append(rng.choice(options))
    return questions
