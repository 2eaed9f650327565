"""Typed errors for sgref."""

from typing import Literal

NotFoundKind = Literal["repository", "revision", "commit", "file"]


class SgrefError(Exception):
    """Base exception for all sgref errors."""


class MalformedReferenceError(SgrefError):
    """Raised when a reference string does not have the required structure."""

    def __init__(self, reference: str, reason: str) -> None:
        """Initialize with the offending reference text and why it was rejected."""
        self.reference = reference
        self.reason = reason
        super().__init__(f"Malformed reference {reference!r}: {reason}")


class TooManyQueryMarkersError(MalformedReferenceError):
    """Raised when the path segment of a reference holds more than one ``?``."""

    def __init__(self, reference: str, count: int) -> None:
        """Initialize with the reference text and the number of ``?`` found."""
        self.count = count
        super().__init__(reference, f"expected at most one '?' in the path, found {count}")


class NotFoundError(SgrefError):
    """Raised when the code host reports that a repository, revision, commit or file does not exist."""

    def __init__(
        self,
        kind: NotFoundKind,
        remote: str,
        *,
        revision: str | None = None,
        path: str | None = None,
    ) -> None:
        """Initialize with the missing kind and the coordinates that were looked up."""
        self.kind = kind
        self.remote = remote
        self.revision = revision
        self.path = path
        target = remote
        if revision is not None:
            target = f"{target}@{revision}"
        if path is not None:
            target = f"{target}/-/{path}"
        super().__init__(f"No matching {kind} found: {target}")


class NoDataError(SgrefError):
    """Raised when the code host answers without usable data."""

    def __init__(self, message: str, *, errors: tuple[str, ...] = ()) -> None:
        """Initialize with a description and any error messages from the response."""
        self.errors = errors
        if errors:
            message = f"{message}: {'; '.join(errors)}"
        super().__init__(message)


class TransportError(SgrefError):
    """Raised when a lookup fails in transit.

    ``retryable`` is true for timeouts, connection failures, rate limiting and
    server errors. sgref never retries on its own; the policy is the caller's.
    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        """Initialize with a description and the HTTP status, when one was received."""
        self.status_code = status_code
        self.retryable = status_code is None or status_code == 429 or status_code >= 500
        super().__init__(message)


class LookupTimeoutError(TransportError):
    """Raised when a lookup does not complete in time."""


class TargetKindError(SgrefError):
    """Raised when a file-only operation is applied to a directory target."""
