"""
Base Exception Class

This module contains ONLY the base exception class that all other exceptions inherit from.
All specialized exceptions are in their respective themed modules.

Author: System Architect
Date: 2026-10-19
"""

from typing import Any


class ObjectCacheError(Exception):
    """
    Base exception for all object cache errors.

    Cache primitives never raise these to the host; they are used at
    construction time and inside adapters, where they are translated into
    the no-throw contract (False / miss) before reaching the coordinator.

    Attributes:
        message: Error message
        unit_of_work_id: Unit-of-work id for correlation (if available)
        details: Additional error details (dict)

    Example:
        raise CacheValueError(
            "Unsupported value type",
            details={"type": "set"}
        )
    """

    def __init__(
        self,
        message: str,
        unit_of_work_id: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.unit_of_work_id = unit_of_work_id
        self.details = (details or {}).copy()
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for logging.

        Returns:
            Dict with error_type, message, unit_of_work_id, and details
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "unit_of_work_id": self.unit_of_work_id,
            "details": self.details,
        }

    def with_context(self, **context) -> "ObjectCacheError":
        """
        Add additional context to the error details.

        Returns:
            Self (for method chaining)
        """
        self.details.update(context)
        return self

    def __repr__(self) -> str:
        details_str = f", details={self.details}" if self.details else ""
        uow_str = f", unit_of_work_id='{self.unit_of_work_id}'" if self.unit_of_work_id else ""
        return f"{self.__class__.__name__}(message='{self.message}'{uow_str}{details_str})"

    @classmethod
    def from_exception(
        cls,
        exc: Exception,
        message: str | None = None,
        unit_of_work_id: str | None = None,
        **details,
    ) -> "ObjectCacheError":
        """
        Create an error from another exception.

        Useful for wrapping third-party exceptions with additional context.

        Example:
            >>> try:
            ...     client.ping()
            ... except redis.ConnectionError as e:
            ...     raise CacheConnectionError.from_exception(e, host="localhost")
        """
        error_message = message or str(exc)
        error_details = {
            "original_error": exc.__class__.__name__,
            "original_message": str(exc),
            **details,
        }
        return cls(error_message, unit_of_work_id=unit_of_work_id, details=error_details)


class ConfigurationError(ObjectCacheError):
    """Raised when configuration is invalid or missing."""
    pass
