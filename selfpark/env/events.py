"""Tagged contact events delivered by the physics collaborator."""

from __future__ import annotations

from enum import Enum

from ..constants import PARKING_SPOT_TAG, WALL_TAG


class ContactKind(str, Enum):
    COLLISION_ENTER = "collision_enter"
    COLLISION_EXIT = "collision_exit"
    TRIGGER_ENTER = "trigger_enter"


class ParkingEvent(str, Enum):
    COLLISION_WITH_WALL = "collision_with_wall"
    WALL_CONTACT_ENDED = "wall_contact_ended"
    ENTRY_TO_TARGET_ZONE = "entry_to_target_zone"


_EVENT_TABLE: dict[tuple[ContactKind, str], ParkingEvent] = {
    (ContactKind.COLLISION_ENTER, WALL_TAG): ParkingEvent.COLLISION_WITH_WALL,
    (ContactKind.COLLISION_EXIT, WALL_TAG): ParkingEvent.WALL_CONTACT_ENDED,
    (ContactKind.TRIGGER_ENTER, PARKING_SPOT_TAG): ParkingEvent.ENTRY_TO_TARGET_ZONE,
}


def event_from_contact(kind: ContactKind, tag: str) -> ParkingEvent | None:
    """Return the event for a tagged contact, or None for untracked tags."""
    return _EVENT_TABLE.get((kind, tag))
