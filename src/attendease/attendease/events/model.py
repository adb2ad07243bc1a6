from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Event:
    """A pre-approved institutional event a student can cite."""

    event_id: str
    name: str
    description: str
