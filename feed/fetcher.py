"""Incident sources: the live HTTP endpoint and the built-in demo data."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Protocol

import httpx
from pydantic import TypeAdapter, ValidationError

from feed.config import DEFAULT_REQUEST_TIMEOUT
from feed.errors import (
    MalformedResponseError,
    NetworkError,
    UnexpectedStatusError,
)
from feed.models import IncidentRecord

logger = logging.getLogger(__name__)

_RECORDS = TypeAdapter(list[IncidentRecord])

# ── Demo incidents (Austin, TX) ────────────────────────────────────────
DEMO_INCIDENTS = (
    {
        "id": "1",
        "type": "Theft",
        "description": "Stolen bicycle reported",
        "location": {"lat": 30.2672, "lng": -97.7431},
    },
    {
        "id": "2",
        "type": "Assault",
        "description": "Assault reported near downtown",
        "location": {"lat": 30.2685, "lng": -97.7420},
    },
    {
        "id": "3",
        "type": "Burglary",
        "description": "Residential burglary",
        "location": {"lat": 30.2650, "lng": -97.7450},
    },
)


class IncidentSource(Protocol):
    async def fetch(self) -> list[IncidentRecord]:
        """Return the full, unfiltered incident collection or raise FetchError."""
        ...

    async def aclose(self) -> None:
        ...


class HttpIncidentSource:
    """Single GET against an incident endpoint returning a JSON array."""

    def __init__(
        self,
        url: str,
        *,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.url = url
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout, follow_redirects=True)

    async def fetch(self) -> list[IncidentRecord]:
        try:
            resp = await self._client.get(self.url)
        except httpx.HTTPError as exc:
            raise NetworkError(f"Could not reach incident source: {exc}") from exc

        if not resp.is_success:
            raise UnexpectedStatusError(
                f"Incident source answered {resp.status_code} {resp.reason_phrase}".rstrip(),
                resp.status_code,
            )

        try:
            payload = resp.json()
        except ValueError as exc:
            raise MalformedResponseError("Incident source returned a non-JSON body") from exc

        if not isinstance(payload, list):
            raise MalformedResponseError(
                f"Expected a list of incidents, got {type(payload).__name__}"
            )

        try:
            records = _RECORDS.validate_python(payload)
        except ValidationError as exc:
            raise MalformedResponseError(
                f"Incident source returned {exc.error_count()} invalid field(s)"
            ) from exc

        logger.debug("fetched %d incidents from %s", len(records), self.url)
        return records

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


class StaticIncidentSource:
    """In-process source; without explicit records it serves the demo incidents."""

    def __init__(self, records: list[IncidentRecord] | None = None) -> None:
        self._records = list(records) if records is not None else None

    async def fetch(self) -> list[IncidentRecord]:
        await asyncio.sleep(0)
        if self._records is not None:
            return list(self._records)
        now = datetime.now(timezone.utc)
        return [
            IncidentRecord.model_validate({**raw, "date": now})
            for raw in DEMO_INCIDENTS
        ]

    async def aclose(self) -> None:
        pass
