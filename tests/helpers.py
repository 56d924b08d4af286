"""
Shared test data builders and a scripted incident source.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone

from feed.models import IncidentRecord, Location

FIXED_NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def make_record(
    id: str,
    category: str,
    description: str | None = None,
    lat: float = 30.2672,
    lng: float = -97.7431,
) -> IncidentRecord:
    return IncidentRecord(
        id=id,
        category=category,
        description=description or f"{category} incident {id}",
        occurred_at=FIXED_NOW,
        location=Location(latitude=lat, longitude=lng),
    )


class ScriptedSource:
    """Incident source that replays queued outcomes.

    Each outcome is a list of records or an exception instance. An outcome
    may be queued with a gate; the fetch then blocks until the gate is set.
    """

    def __init__(self, *outcomes):
        self._outcomes = list(outcomes)
        self._gates: dict[int, asyncio.Event] = {}
        self.calls = 0
        self.closed = False

    def push(self, outcome, gate: asyncio.Event | None = None) -> None:
        if gate is not None:
            self._gates[len(self._outcomes)] = gate
        self._outcomes.append(outcome)

    async def fetch(self):
        index = self.calls
        self.calls += 1
        gate = self._gates.get(index)
        if gate is not None:
            await gate.wait()
        else:
            await asyncio.sleep(0)
        outcome = self._outcomes[index] if index < len(self._outcomes) else self._outcomes[-1]
        if isinstance(outcome, BaseException):
            raise outcome
        return list(outcome)

    async def aclose(self):
        self.closed = True
