"""Shared pytest fixtures: in-memory SQLite store and a scriptable gateway."""

from __future__ import annotations

import asyncio

import pytest

from citycast.db import create_db_and_tables, make_engine
from citycast.errors import LookupFailed
from citycast.services.history_store import HistoryStore


class FakeGateway:
    """Answers every city except the unknown ones; can hold a city until released."""

    def __init__(self, unknown=()) -> None:
        self.calls: list[str] = []
        self.unknown = {c.casefold() for c in unknown}
        self._gates: dict[str, asyncio.Event] = {}

    def hold(self, city: str) -> asyncio.Event:
        gate = asyncio.Event()
        self._gates[city] = gate
        return gate

    async def fetch(self, city: str) -> dict:
        self.calls.append(city)
        gate = self._gates.get(city)
        if gate is not None:
            await gate.wait()
        if city.casefold() in self.unknown:
            raise LookupFailed(city)
        return {"name": city, "temperature_c": 21.5}


@pytest.fixture
def engine():
    engine = make_engine("sqlite://")
    create_db_and_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def store(engine) -> HistoryStore:
    return HistoryStore(engine)


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway(unknown={"Atlantis"})
