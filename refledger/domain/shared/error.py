"""Error hierarchy for the referral ledger.

Error layers:
- RefLedgerError: Base class for all errors raised by this package
- DomainError: Bad arguments, missing records/indexes, unknown operations
- InfrastructureError: Ledger failures and multi-step updates that stopped midway

Nothing here is retried. Multi-step operations are never rolled back, so a
PartialUpdateError describes exactly which steps were applied before the failure.
"""

from collections.abc import Sequence


class RefLedgerError(Exception):
    """Base class for all referral ledger errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(message)


# =============================================================================
# Domain Errors
# =============================================================================


class DomainError(RefLedgerError):
    """Base class for domain errors."""


class InvalidArgumentError(DomainError):
    """Wrong argument count, shape or content."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message, code="INVALID_ARGUMENT")
        self.field = field


class InvalidIdentifierError(InvalidArgumentError):
    """Record id cannot be stored in an index bucket."""

    def __init__(self, message: str, record_id: str) -> None:
        super().__init__(message, field="id")
        self.record_id = record_id


class NotFoundError(DomainError):
    """Record key absent from the ledger."""

    def __init__(self, message: str, key: str | None = None) -> None:
        super().__init__(message)
        self.key = key


class IndexNotFoundError(NotFoundError):
    """Index bucket absent from the ledger."""


class UnknownOperationError(DomainError):
    """Invocation name not present in the dispatch registry."""

    def __init__(self, name: str, kind: str | None = None) -> None:
        where = f" {kind}" if kind else ""
        super().__init__(f"Received unknown{where} function: {name}")
        self.name = name


class StatusConflictError(DomainError):
    """Caller's expected old status does not match the stored record."""


class CorruptRecordError(DomainError):
    """Stored bytes cannot be parsed as a referral."""


# =============================================================================
# Infrastructure Errors
# =============================================================================


class InfrastructureError(RefLedgerError):
    """Base class for ledger/system errors."""


class LedgerReadError(InfrastructureError):
    """Ledger get failed."""

    def __init__(self, key: str, reason: str = "") -> None:
        message = f"Failed to get state for {key}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.key = key


class LedgerWriteError(InfrastructureError):
    """Ledger put failed."""

    def __init__(self, key: str, reason: str = "") -> None:
        message = f"Failed to update state for {key}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.key = key


class IndexWriteError(InfrastructureError):
    """Bucket read-modify-write failed; the bucket may be unchanged."""

    def __init__(self, bucket_key: str, record_id: str, cause: RefLedgerError) -> None:
        super().__init__(f"Could not update index {bucket_key} for {record_id}: {cause.message}")
        self.bucket_key = bucket_key
        self.record_id = record_id
        self.cause = cause


class PartialUpdateError(InfrastructureError):
    """A multi-step operation failed after some steps were applied.

    Attributes:
        record_id: Record the operation was acting on.
        step: Name of the step that failed.
        applied: Steps already applied and left in place.
        detail: Descriptive payload returned to the invoking client.
    """

    def __init__(
        self,
        record_id: str,
        step: str,
        applied: Sequence[str],
        detail: str,
        cause: RefLedgerError | None = None,
    ) -> None:
        message = f"{step} failed for {record_id} after {list(applied) or 'no steps'}"
        if cause is not None:
            message = f"{message}: {cause.message}"
        super().__init__(message)
        self.record_id = record_id
        self.step = step
        self.applied = list(applied)
        self.detail = detail.encode("utf-8")
        self.cause = cause


class ConfigurationError(InfrastructureError):
    """System misconfiguration detected."""
