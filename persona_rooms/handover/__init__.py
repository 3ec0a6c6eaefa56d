"""Dominance handover."""

from persona_rooms.handover.manager import HandoverManager
from persona_rooms.handover.models import HandoverDecision, HandoverReason


__all__ = ["HandoverDecision", "HandoverManager", "HandoverReason"]
