"""Orchestration loop and its output models."""

from persona_rooms.orchestration.loop import ConversationOrchestrator
from persona_rooms.orchestration.models import MembershipNotice, OrchestrationResult, TurnMessage


__all__ = ["ConversationOrchestrator", "MembershipNotice", "OrchestrationResult", "TurnMessage"]
