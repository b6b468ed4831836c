"""Domain exceptions.

Errors raised for invalid configuration or invalid operator input.
Expected remote-service failures are never raised; they travel as
result values (see ``shoptagger.domain.models``).
"""

from typing import Any


class DomainError(Exception):
    """Base class for all domain exceptions.

    All domain errors should inherit from this class to allow
    catching domain-specific errors at the application layer.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize domain error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(DomainError):
    """Raised when the store connection is not configured correctly."""

    pass


class InvalidGenerateCountError(DomainError):
    """Raised when a generate request asks for too few or too many products."""

    def __init__(self, count: int, minimum: int, maximum: int) -> None:
        """Initialize invalid count error.

        Args:
            count: The requested count.
            minimum: Smallest allowed count.
            maximum: Largest allowed count.
        """
        super().__init__(
            f"Invalid product count {count}: must be between {minimum} and {maximum}",
            details={"count": count, "minimum": minimum, "maximum": maximum},
        )


class InvalidTagError(DomainError):
    """Raised when a tag is blank or too long."""

    def __init__(self, tag: str, reason: str) -> None:
        """Initialize invalid tag error.

        Args:
            tag: The rejected tag value.
            reason: Why it was rejected.
        """
        super().__init__(
            f"Invalid tag {tag!r}: {reason}",
            details={"tag": tag, "reason": reason},
        )
