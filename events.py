"""
Bounded event history for wars, expansions, nuclear strikes and secessions.
Newest entries come first; the oldest are discarded beyond capacity.
"""

from dataclasses import dataclass
from enum import Enum
from itertools import count
from typing import Iterator, List, Optional


class EventKind(Enum):
    EXPANSION = "expansion"
    NUCLEAR = "nuclear"
    WAR = "war"
    SECESSION = "secession"


@dataclass(frozen=True)
class WarEvent:
    """Immutable record. Countries are referenced by name so entries outlive them."""
    id: str
    kind: EventKind
    attacker: str
    defender: str
    result: str
    date: str

    def __str__(self) -> str:
        return f"[{self.date}] {self.kind.value.upper()}: {self.attacker} vs {self.defender} - {self.result}"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "kind": self.kind.value,
            "attacker": self.attacker,
            "defender": self.defender,
            "result": self.result,
            "date": self.date,
        }


class EventLog:
    """Newest-first, capped history of WarEvents."""

    def __init__(self, capacity: int = 10):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self._events: List[WarEvent] = []
        self._ids = count(1)

    def record(self, kind: EventKind, attacker: str, defender: str,
               result: str, date: str) -> WarEvent:
        """Build an event with the next sequential id and append it."""
        event = WarEvent(
            id=f"{kind.value}-{next(self._ids)}",
            kind=kind,
            attacker=attacker,
            defender=defender,
            result=result,
            date=date,
        )
        self.append(event)
        return event

    def append(self, event: WarEvent) -> None:
        self._events.insert(0, event)
        del self._events[self.capacity:]

    @property
    def latest(self) -> Optional[WarEvent]:
        return self._events[0] if self._events else None

    def __iter__(self) -> Iterator[WarEvent]:
        return iter(self._events)

    def __len__(self) -> int:
        return len(self._events)

    def to_list(self) -> List[WarEvent]:
        return list(self._events)
