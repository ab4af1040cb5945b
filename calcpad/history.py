"""Calculation history.

History is an immutable tuple of entries, most recent first. The functions
here return new tuples; the session state holds the current one.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from calcpad.errors import UnknownHistoryEntry
from calcpad.modes import Mode

DEFAULT_HISTORY_LIMIT = 1000


class HistoryEntry(BaseModel):
    """One completed calculation. Immutable once created."""
    model_config = ConfigDict(frozen=True)

    id: int = Field(..., ge=1)
    expression: str
    result: str
    mode: Mode = Mode.STANDARD
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator('result')
    @classmethod
    def result_must_not_be_empty(cls, v: str) -> str:
        if not v:
            raise ValueError('Result cannot be empty')
        return v


History = Tuple[HistoryEntry, ...]


def record(history: History, entry: HistoryEntry, limit: int = DEFAULT_HISTORY_LIMIT) -> History:
    """Prepend ``entry``, pruning the oldest entries beyond ``limit``."""
    return ((entry,) + history)[:limit]


def find(history: History, entry_id: int) -> HistoryEntry:
    for entry in history:
        if entry.id == entry_id:
            return entry
    raise UnknownHistoryEntry(entry_id)


def search(history: History, keyword: str) -> List[HistoryEntry]:
    """Entries whose expression or result contains ``keyword`` (case-insensitive)."""
    needle = keyword.lower()
    return [e for e in history if needle in e.expression.lower() or needle in e.result.lower()]


def last(history: History) -> Optional[HistoryEntry]:
    return history[0] if history else None


def format_entry(entry: HistoryEntry) -> str:
    stamp = entry.timestamp.strftime("%Y-%m-%d %H:%M:%S")
    return f"[{entry.id}] {entry.expression} = {entry.result}  ({entry.mode.value}, {stamp})"
