"""persona_rooms - Multi-persona conversation orchestration core.

Decides, for a group of AI personas attached to a shared conversation room,
who speaks next, when dominance over the conversation changes hands, and when
personas join or leave. Rooms are independent and run concurrently.
"""

__version__ = "0.1.0"
