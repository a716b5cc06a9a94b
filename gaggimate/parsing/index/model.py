from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


@dataclass(frozen=True)
class IndexHeader:
    magic: int
    version: int
    entry_size: int
    entry_count: int
    next_id: int


@dataclass(frozen=True)
class IndexEntry:
    """
    One shot summary as persisted by the firmware.

    Attributes:
        id: Numeric shot ID, also the basename of the ``.slog`` file.
        timestamp: Unix timestamp (seconds) of the shot start.
        duration: Shot duration in milliseconds.
        volume: Final volume in ml, or ``None`` when not recorded.
        rating: User rating, ``0`` when unset.
        flags: Raw flag byte.
        profile_id: ID of the brewing profile used.
        profile_name: Display name of the brewing profile used.
        completed: Whether the firmware finished writing the shot.
        deleted: Whether the shot was deleted from history.
        has_notes: Whether user notes exist for this shot.
        incomplete: Negation of ``completed``.
    """
    id: int
    timestamp: int
    duration: int
    volume: Optional[float]
    rating: int
    flags: int
    profile_id: str
    profile_name: str
    completed: bool
    deleted: bool
    has_notes: bool
    incomplete: bool


@dataclass(frozen=True)
class IndexData:
    header: IndexHeader
    entries: tuple[IndexEntry, ...]


class ShotListItem(BaseModel):
    """A history list row as handed to callers; serialized with camelCase keys."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    profile: str
    profile_id: str = Field(serialization_alias="profileId")
    timestamp: int
    duration: int
    samples: int = 0
    volume: Optional[float] = None
    rating: Optional[int] = None
    incomplete: bool = False
    notes: Optional[Any] = None
    loaded: bool = False
    data: Optional[Any] = None

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)
