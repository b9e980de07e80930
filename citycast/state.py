"""Lifecycle of the most recent weather lookup."""
from __future__ import annotations
from dataclasses import asdict, dataclass
from typing import ClassVar, Union


@dataclass(frozen=True)
class Idle:
    status: ClassVar[str] = "idle"


@dataclass(frozen=True)
class Loading:
    query: str
    status: ClassVar[str] = "loading"


@dataclass(frozen=True)
class Success:
    query: str
    result: dict
    status: ClassVar[str] = "success"


@dataclass(frozen=True)
class Failed:
    query: str
    error: str
    status: ClassVar[str] = "failed"


FetchState = Union[Idle, Loading, Success, Failed]


def state_to_dict(state: FetchState) -> dict:
    return {"status": state.status, **asdict(state)}
