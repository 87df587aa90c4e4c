"""Accumulated per-conversation knowledge about the user."""

from __future__ import annotations

from typing import Any, Literal, Mapping

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ExperienceLevel = Literal["beginner", "intermediate", "advanced", "unknown"]
PlayFrequency = Literal["casual", "weekly", "daily", "competitive"]
PlayStyle = Literal["power", "control", "balanced", "spin", "unknown"]
TravelDistance = Literal["local", "25_miles", "50_miles", "100_miles", "anywhere"]
TournamentPreference = Literal["recreational", "competitive", "any"]
DatePreference = Literal[
    "this_weekend", "next_week", "this_month", "next_month", "flexible"
]
DuprIntent = Literal["personal", "lookup", "general"]

UNKNOWN = "unknown"


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class Coordinates(_CamelModel):
    lat: float
    lng: float


class Location(_CamelModel):
    """Partial location; any subset of the fields may be known."""

    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    coordinates: Coordinates | None = None

    def is_known(self) -> bool:
        return bool(self.city or self.state or self.zip_code or self.coordinates)


class UserContext(_CamelModel):
    """What the assistant has learned about the user so far.

    Every field is optional; ``None`` means unknown.  Serialised with
    camelCase aliases (``duprIntent``) and accepts either spelling.
    """

    experience: ExperienceLevel | None = None
    budget: str | None = None
    play_frequency: PlayFrequency | None = None
    play_style: PlayStyle | None = None
    physical_considerations: str | None = None
    goals: list[str] | None = None
    preferences: dict[str, Any] | None = None
    location: Location | None = None
    travel_distance: TravelDistance | None = None
    skill_level: str | None = Field(
        default=None, description="Division such as '3.5', 'recreational' or '5.0+'"
    )
    tournament_preference: TournamentPreference | None = None
    date_preference: DatePreference | None = None
    current_paddle: str | None = None
    comparison_criteria: list[str] | None = None
    dupr_score: float | None = None
    dupr_goals: list[str] | None = None
    dupr_intent: DuprIntent | None = None
    player_name: str | None = None

    def known_fields(self) -> dict[str, Any]:
        """Fields holding a known value, keyed by camelCase alias, in field order."""
        known: dict[str, Any] = {}
        for name, field in type(self).model_fields.items():
            value = getattr(self, name)
            if _is_known(value):
                known[field.alias or name] = value
        return known

    def is_empty(self) -> bool:
        return not self.known_fields()


def _is_known(value: Any) -> bool:
    if value is None or value == UNKNOWN:
        return False
    if isinstance(value, (str, list, dict)) and not value:
        return False
    if isinstance(value, Location):
        return value.is_known()
    return True


def merge_context(
    base: UserContext, update: UserContext | Mapping[str, Any]
) -> UserContext:
    """Return ``base`` overlaid with the non-null fields ``update`` sets.

    Fields that ``update`` leaves unset or sets to ``None`` keep their
    previous value; nothing is ever cleared here.
    """
    if not isinstance(update, UserContext):
        update = UserContext.model_validate(update)
    changes = {
        name: getattr(update, name)
        for name in update.model_fields_set
        if getattr(update, name) is not None
    }
    if not changes:
        return base.model_copy(deep=True)
    merged = base.model_dump()
    for name, value in changes.items():
        merged[name] = value.model_dump() if isinstance(value, BaseModel) else value
    return UserContext.model_validate(merged)
