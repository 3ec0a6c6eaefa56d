"""Room membership: join/leave events and their manager."""

from persona_rooms.membership.events import EventKind, JoinLeaveEvent
from persona_rooms.membership.manager import JoinLeaveManager


__all__ = ["EventKind", "JoinLeaveEvent", "JoinLeaveManager"]
