"""Pydantic value types for incident records, filters and feed view state."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator


class Category(str, Enum):
    THEFT = "Theft"
    ASSAULT = "Assault"
    BURGLARY = "Burglary"

    @classmethod
    def parse(cls, value: str) -> Category | None:
        """Return the matching category, or None for values outside the enumeration."""
        try:
            return cls(value)
        except ValueError:
            return None


# ── Incident records ──────────────────────────────────────────────────

class Location(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(
        ge=-90, le=90,
        validation_alias=AliasChoices("latitude", "lat"),
    )
    longitude: float = Field(
        ge=-180, le=180,
        validation_alias=AliasChoices("longitude", "lng", "lon"),
    )


class IncidentRecord(BaseModel):
    # category stays a plain string: the source may report categories we
    # don't know, and those must parse but never become visible
    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    id: str
    category: str = Field(validation_alias=AliasChoices("category", "type"))
    description: str
    occurred_at: datetime = Field(
        validation_alias=AliasChoices("occurred_at", "occurredAt", "date"),
    )
    location: Location


# ── Filters ───────────────────────────────────────────────────────────

def _all_enabled() -> dict[Category, bool]:
    return {category: True for category in Category}


class FilterState(BaseModel):
    model_config = ConfigDict(frozen=True)

    enabled: dict[Category, bool] = Field(default_factory=_all_enabled)

    @model_validator(mode="after")
    def _every_category_present(self) -> FilterState:
        missing = [c.value for c in Category if c not in self.enabled]
        if missing:
            raise ValueError(f"filter state is missing categories: {', '.join(missing)}")
        return self

    def is_enabled(self, category: str) -> bool:
        known = Category.parse(category)
        if known is None:
            return False
        return self.enabled[known]

    def with_category(self, category: Category | str, enabled: bool) -> FilterState:
        category = Category(category)
        return FilterState(enabled={**self.enabled, category: enabled})

    def toggled(self, category: Category | str) -> FilterState:
        category = Category(category)
        return self.with_category(category, not self.enabled[category])


# ── Snapshots ─────────────────────────────────────────────────────────

class FeedSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    visible_records: tuple[IncidentRecord, ...] = ()
    counts_by_category: dict[Category, int]
    last_updated: datetime | None = None

    @property
    def total(self) -> int:
        return len(self.visible_records)


# ── View state ────────────────────────────────────────────────────────

class Idle(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal["idle"] = "idle"


class Loading(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal["loading"] = "loading"
    previous: FeedSnapshot | None = None


class Success(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal["success"] = "success"
    snapshot: FeedSnapshot


class Error(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal["error"] = "error"
    message: str
    previous: FeedSnapshot | None = None


ViewState = Annotated[Union[Idle, Loading, Success, Error], Field(discriminator="status")]


def last_snapshot(state: ViewState) -> FeedSnapshot | None:
    """The snapshot a view state carries, whether fresh or retained across a refresh."""
    if isinstance(state, Success):
        return state.snapshot
    if isinstance(state, (Loading, Error)):
        return state.previous
    return None
