"""Custom exceptions for the persona room orchestration core.

Not-found conditions (unknown room, unknown persona) are not part of
this hierarchy; they are reported through ``None`` / no-op returns.
All exceptions are namespaced to avoid shadowing Python builtins.
"""

from __future__ import annotations


class PersonaRoomsError(Exception):
    """Base exception for all orchestration-core errors.

    All exceptions inherit from this class to enable catching any
    core error with a single except clause.
    """

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        """Initialize the error.

        Args:
            message: Human-readable error description
            cause: Original exception that caused this error
        """
        self.message = message
        self.cause = cause
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause


class RoomConfigError(PersonaRoomsError):
    """Raised when scheduler configuration is inconsistent.

    Attributes:
        field: The settings field that failed validation.
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize configuration error.

        Args:
            message: Error description
            field: The field that failed validation
        """
        self.field = field
        super().__init__(message)


class GenerationError(PersonaRoomsError):
    """Raised when the text-generation collaborator fails.

    The orchestration loop never sees this error directly; the fallback
    wrapper absorbs it and substitutes a default line.

    Attributes:
        operation: Which generation call failed (thinking, dialogue, introduction).
        persona_id: The persona the text was requested for.
    """

    def __init__(
        self,
        message: str,
        operation: str,
        persona_id: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        """Initialize generation error.

        Args:
            message: Error description
            operation: Name of the generation call
            persona_id: Persona the call was made for
            cause: Original exception
        """
        self.operation = operation
        self.persona_id = persona_id
        super().__init__(message, cause)


class GenerationTimeoutError(GenerationError):
    """Raised when a generation call exceeds its timeout.

    NOT named TimeoutError to avoid shadowing builtins.TimeoutError.
    """

    def __init__(
        self,
        message: str,
        operation: str,
        timeout_seconds: float,
        persona_id: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        """Initialize generation timeout error.

        Args:
            message: Error description
            operation: Name of the generation call
            timeout_seconds: Configured timeout value
            persona_id: Persona the call was made for
            cause: Original exception
        """
        self.timeout_seconds = timeout_seconds
        super().__init__(message, operation, persona_id, cause)


__all__ = [
    "GenerationError",
    "GenerationTimeoutError",
    "PersonaRoomsError",
    "RoomConfigError",
]
