"""Speaker selection."""

from persona_rooms.selection.speaker import CandidateScore, SpeakerSelector


__all__ = ["CandidateScore", "SpeakerSelector"]
