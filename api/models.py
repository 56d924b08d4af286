"""Pydantic response models for the API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class FilterOptions(BaseModel):
    categories: list[str]
    enabled: dict[str, bool]


class IncidentRow(BaseModel):
    id: str
    category: str
    description: str
    occurred_at: datetime
    lat: float
    lng: float


class CategoryCount(BaseModel):
    category: str
    count: int
    enabled: bool


class FeedView(BaseModel):
    status: str
    error: str | None = None
    last_updated: datetime | None = None
    total: int = 0
    consecutive_failures: int = 0
    counts: list[CategoryCount]
    incidents: list[IncidentRow]
    filters: FilterOptions
