"""
Persistence record - GameState to and from plain data.

Built on a pydantic TypeAdapter over the state dataclasses, so enums,
nested dataclasses and the RulesConfig model all round-trip:

    from_record(to_record(state)) == state

fingerprint() returns the canonical JSON bytes of a state. The state
machine compares fingerprints to detect a step that changed nothing.
"""

from __future__ import annotations
from typing import Any

from pydantic import TypeAdapter

from .state import GameState

_STATE_ADAPTER = TypeAdapter(GameState)


def to_record(state: GameState) -> dict[str, Any]:
    """JSON-compatible dict for a state."""
    return _STATE_ADAPTER.dump_python(state, mode="json")


def from_record(record: dict[str, Any]) -> GameState:
    return _STATE_ADAPTER.validate_python(record)


def to_json(state: GameState, indent: int | None = None) -> str:
    return _STATE_ADAPTER.dump_json(state, indent=indent).decode()


def from_json(data: str | bytes) -> GameState:
    return _STATE_ADAPTER.validate_json(data)


def fingerprint(state: GameState) -> bytes:
    return _STATE_ADAPTER.dump_json(state)
