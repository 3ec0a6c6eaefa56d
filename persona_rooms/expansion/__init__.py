"""Expanded info attachments for persona turns."""

from persona_rooms.expansion.info import ExpandedInfo, expand_info


__all__ = ["ExpandedInfo", "expand_info"]
