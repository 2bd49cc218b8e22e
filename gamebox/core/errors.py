"""Error taxonomy shared by the moderation and follow services."""

from __future__ import annotations


class TrustError(Exception):
    """Base class for errors surfaced to API callers."""

    kind = "error"
    status_code = 500

    def __init__(self, detail: str, **extra):
        super().__init__(detail)
        self.detail = detail
        self.extra = extra


class NotFoundError(TrustError):
    kind = "not_found"
    status_code = 404


class ForbiddenError(TrustError):
    kind = "forbidden"
    status_code = 403


class InvalidOperationError(TrustError):
    kind = "invalid_operation"
    status_code = 400


class StorageFailureError(TrustError):
    """The store could not commit; the whole unit of work was rolled back."""

    kind = "storage_failure"
    status_code = 503
