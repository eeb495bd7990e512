"""Exceptions raised by cache sessions.

Every failure surfaced by a session is a CacheException carrying a
human-readable message, a machine-readable error_code and a details
dict (key, master key, operation). Callers branch on the class or on
error_code; nothing here retries or recovers.
"""

from typing import Any


class CacheException(Exception):
    """Base exception for all cache errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. key, operation).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class InvalidArgumentError(CacheException):
    """Raised when a write receives no value or a value that is not a cache candidate."""

    def __init__(self, message: str, argument: str | None = None) -> None:
        """Initialize with message and optional argument name.

        Args:
            message: Description of the invalid argument.
            argument: Name of the offending argument.
        """
        details = {"argument": argument} if argument else {}
        super().__init__(message, "INVALID_ARGUMENT", details)


class UnregisteredCandidateError(CacheException):
    """Raised when writing a record whose master key was never registered."""

    def __init__(self, master_key: str) -> None:
        """Initialize with the unregistered master key.

        Args:
            master_key: Master key pattern of the rejected record type.
        """
        super().__init__(
            f"Invalid or unregistered candidate: {master_key!r}",
            "UNREGISTERED_CANDIDATE",
            {"master_key": master_key},
        )


class SerializationError(CacheException):
    """Raised when a value cannot be encoded for storage."""

    def __init__(self, type_name: str, reason: str) -> None:
        super().__init__(
            f"Failed to serialize {type_name}",
            "SERIALIZATION_ERROR",
            {"type": type_name, "reason": reason},
        )


class DeserializationError(CacheException):
    """Raised when a stored value cannot be decoded into the requested type."""

    def __init__(self, type_name: str, reason: str, key: str | None = None) -> None:
        details: dict[str, Any] = {"type": type_name, "reason": reason}
        if key is not None:
            details["key"] = key
        super().__init__(
            f"Failed to deserialize into {type_name}",
            "DESERIALIZATION_ERROR",
            details,
        )


class BackendError(CacheException):
    """Raised when the key-value backend fails an operation."""

    def __init__(
        self,
        operation: str,
        reason: str,
        key: str | None = None,
        error_code: str = "BACKEND_ERROR",
        message: str | None = None,
    ) -> None:
        """Initialize with the failing operation and reason.

        Args:
            operation: Session operation name (e.g. 'set', 'get_keys').
            reason: Text of the underlying error.
            key: Physical key or pattern involved, when there is one.
            error_code: Machine-readable code (subclasses override).
            message: Optional message; built from operation and key otherwise.
        """
        details: dict[str, Any] = {"operation": operation, "reason": reason}
        if key is not None:
            details["key"] = key
        if message is None:
            target = f" for {key!r}" if key is not None else ""
            message = f"Backend {operation} failed{target}: {reason}"
        super().__init__(message, error_code, details)
        self.operation = operation
        self.key = key


class KeyNotFoundError(BackendError):
    """Raised when a read finds no value at the physical key."""

    def __init__(self, operation: str, key: str) -> None:
        super().__init__(
            operation,
            "key not found",
            key=key,
            error_code="KEY_NOT_FOUND",
            message=f"Key not found: {key}",
        )


class BackendTimeoutError(BackendError):
    """Raised when a backend call exceeds its time budget."""

    def __init__(self, operation: str, timeout: float, key: str | None = None) -> None:
        super().__init__(
            operation,
            f"timed out after {timeout}s",
            key=key,
            error_code="BACKEND_TIMEOUT",
        )
        self.timeout = timeout


class CacheConnectionError(BackendError):
    """Raised when the session cannot connect to or ping the backend."""

    def __init__(self, address: str, reason: str) -> None:
        super().__init__(
            "connect",
            reason,
            error_code="CONNECTION_ERROR",
            message=f"Cannot connect to Redis at {address}: {reason}",
        )
        self.details["address"] = address
