"""Exception hierarchy for genesis assembly and artifact exchange."""

from __future__ import annotations

from collections.abc import Sequence


class GenesisKitError(Exception):
    """
    Base exception for all errors raised by this package.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r})"


class InvalidInputError(GenesisKitError, ValueError):
    """
    Raised when a caller-supplied value is malformed.

    Also a ValueError so that pydantic validators can raise it directly and
    have it reported inside a ValidationError.

    Attributes:
        field: Name of the offending input.
        detail: What is wrong with it.
    """

    def __init__(self, field: str, detail: str) -> None:
        self.field = field
        self.detail = detail
        super().__init__(f"Invalid {field}: {detail}")


class StoreError(GenesisKitError):
    """Base class for control-plane store failures."""


class StoreConnectionError(StoreError):
    """Raised when the store cannot be reached at all."""


class StoreResponseError(StoreError):
    """
    Raised when a successful response body cannot be decoded.

    Attributes:
        operation: Short description of the call (e.g. "create ConfigMap").
        object_name: Name of the object involved, if any.
    """

    def __init__(self, operation: str, detail: str, *, object_name: str | None = None) -> None:
        self.operation = operation
        self.object_name = object_name
        target = f" {object_name}" if object_name else ""
        super().__init__(f"{operation}{target} returned an unreadable body: {detail}")


class StoreStatusError(StoreError):
    """
    Raised when the store answers a request with an error status.

    Attributes:
        status_code: HTTP status returned by the store.
        operation: Short description of the call (e.g. "create ConfigMap").
        object_name: Name of the object involved, if any.
        reason: Message returned by the store.
    """

    CONFLICT = 409
    NOT_FOUND = 404
    EXPIRED = 410
    RETRYABLE = frozenset({429, 500, 502, 503, 504})

    def __init__(
        self,
        status_code: int,
        operation: str,
        *,
        object_name: str | None = None,
        reason: str = "",
    ) -> None:
        self.status_code = status_code
        self.operation = operation
        self.object_name = object_name
        self.reason = reason

        target = f" {object_name}" if object_name else ""
        msg = f"{operation}{target} failed with HTTP {status_code}"
        if reason:
            msg = f"{msg}: {reason}"

        super().__init__(msg)

    @property
    def is_conflict(self) -> bool:
        """The object already exists."""
        return self.status_code == self.CONFLICT

    @property
    def is_not_found(self) -> bool:
        """The object does not exist."""
        return self.status_code == self.NOT_FOUND

    @property
    def is_expired(self) -> bool:
        """The continuation token is older than the store's compaction window."""
        return self.status_code == self.EXPIRED

    @property
    def is_retryable(self) -> bool:
        """Rate limited or temporarily unavailable."""
        return self.status_code in self.RETRYABLE


class PermissionProbeError(StoreError):
    """Raised when the upfront list probe against the store fails."""


class RecordConflictError(GenesisKitError):
    """
    Raised when a record already exists and its policy forbids skipping.

    Attributes:
        record_name: Target object name.
        object_kind: "ConfigMap" or "Secret".
    """

    def __init__(self, record_name: str, object_kind: str) -> None:
        self.record_name = record_name
        self.object_kind = object_kind
        super().__init__(
            f"{object_kind} {record_name} already exists. "
            "Delete it or choose a different output target."
        )


class PublishError(GenesisKitError):
    """
    Raised after a publish run in which at least one record failed.

    Attributes:
        failures: Every per-record error collected from the run.
    """

    def __init__(self, failures: Sequence[Exception]) -> None:
        self.failures = list(failures)
        lines = "\n".join(f"  - {failure}" for failure in self.failures)
        super().__init__(f"{len(self.failures)} record(s) failed to publish:\n{lines}")


class SyncError(GenesisKitError):
    """Raised when a listing cannot be completed."""


class PaginationProtocolError(SyncError):
    """
    Raised when the store hands out a continuation token it already issued.

    Attributes:
        token: The repeated token.
    """

    def __init__(self, token: str) -> None:
        self.token = token
        super().__init__(
            f"Detected repeated pagination token {token}; aborting to avoid an infinite loop."
        )


class CompileGenesisError(GenesisKitError):
    """Raised when stored genesis or allocation payloads cannot be merged."""
