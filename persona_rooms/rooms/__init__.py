"""Conversation rooms: state records, lifecycle scheduling and the store."""

from persona_rooms.rooms.models import (
    ConversationRoom,
    HistoryEntry,
    ParticipantState,
    RoomSnapshot,
)
from persona_rooms.rooms.scheduler import AsyncioScheduler, ScheduledHandle, TaskScheduler
from persona_rooms.rooms.store import RoomStore


__all__ = [
    "AsyncioScheduler",
    "ConversationRoom",
    "HistoryEntry",
    "ParticipantState",
    "RoomSnapshot",
    "RoomStore",
    "ScheduledHandle",
    "TaskScheduler",
]
