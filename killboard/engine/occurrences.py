"""
killboard.engine.occurrences — Kill/Death Classification
=========================================================

An *occurrence* is one tracked member's role in one event.  The killer and
victim checks are independent, so an event can yield a kill, a death, or
nothing for a given member.
"""

from __future__ import annotations

from dataclasses import dataclass

from killboard.engine.schemas import KillboardEvent

__all__ = ["Occurrence", "classify"]


@dataclass(frozen=True, slots=True)
class Occurrence:
    """A classified kill or death tied to one member."""

    event: KillboardEvent
    member_id: str
    member_name: str
    is_kill: bool

    @property
    def kind(self) -> str:
        return "kill" if self.is_kill else "death"

    def as_row(self) -> dict:
        """Column values for :class:`~killboard.database.models.KillEvent`."""
        return {
            "event_id": self.event.event_id,
            "killer_name": self.event.killer.name,
            "killer_id": self.event.killer.id,
            "victim_name": self.event.victim.name,
            "victim_id": self.event.victim.id,
            "fame": self.event.fame,
            "timestamp": self.event.timestamp,
            "guild_member_involved": self.member_name,
            "is_kill": self.is_kill,
        }


def classify(event: KillboardEvent, member_id: str, member_name: str) -> list[Occurrence]:
    """Return the occurrences *event* produces for the given member."""
    found: list[Occurrence] = []
    if event.killer.id == member_id:
        found.append(Occurrence(event, member_id, member_name, is_kill=True))
    if event.victim.id == member_id:
        found.append(Occurrence(event, member_id, member_name, is_kill=False))
    return found
