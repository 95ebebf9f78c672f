# Overview: Classified failure taxonomy shared by services and routes.

"""
Failure taxonomy.

Every abort path in the services raises exactly one of these. Routes turn
them into JSON bodies with `to_dict()` and the matching `status_code`; the
message is always operator-safe (raw storage errors never reach a client).
"""

from __future__ import annotations

from enum import Enum


class MarketplaceError(Exception):
    """Base class for classified failures."""

    status_code = 500
    kind = "INTERNAL_ERROR"

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        body = {"error": self.message, "kind": self.kind}
        if self.details:
            body["details"] = self.details
        return body


class AuthFailureKind(str, Enum):
    MISSING = "MISSING_CREDENTIAL"
    INVALID = "INVALID_CREDENTIAL"
    EXPIRED = "CREDENTIAL_EXPIRED"


_AUTH_MESSAGES = {
    AuthFailureKind.MISSING: "Missing token",
    AuthFailureKind.INVALID: "Invalid token",
    AuthFailureKind.EXPIRED: "Token expired",
}


class AuthFailure(MarketplaceError):
    """401: no credential, bad credential, or expired credential."""

    status_code = 401

    def __init__(self, kind: AuthFailureKind, message: str | None = None):
        super().__init__(message or _AUTH_MESSAGES[kind])
        self.kind = kind.value
        self.reason = kind


class AuthzReason(str, Enum):
    NOT_OWNER = "NOT_OWNER"
    NOT_AUTHORIZED = "NOT_AUTHORIZED"


class AuthzFailure(MarketplaceError):
    """403: the verified caller may not act on the resource."""

    status_code = 403

    def __init__(self, reason: AuthzReason, message: str | None = None):
        if message is None:
            if reason is AuthzReason.NOT_OWNER:
                message = "Caller does not own this resource"
            else:
                message = "Caller is not authorized for this operation"
        super().__init__(message)
        self.kind = reason.value
        self.reason = reason


class Entity(str, Enum):
    USER = "USER"
    PRODUCT = "PRODUCT"
    BUSINESS = "BUSINESS"
    ORDER = "ORDER"
    DRONE = "DRONE"
    RESOURCE = "RESOURCE"


class NotFoundFailure(MarketplaceError):
    """404: the resource is absent (or no longer active where that matters)."""

    status_code = 404

    def __init__(self, entity: Entity, message: str | None = None, details: dict | None = None):
        super().__init__(message or f"{entity.value.capitalize()} not found", details)
        self.kind = f"{entity.value}_NOT_FOUND"
        self.entity = entity


class ValidationKind(str, Enum):
    EMPTY_ORDER = "EMPTY_ORDER"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    PRODUCT_INACTIVE = "PRODUCT_INACTIVE"
    BUSINESS_UNVERIFIED = "BUSINESS_UNVERIFIED"
    INVALID_FIELD = "INVALID_FIELD"


class ValidationFailure(MarketplaceError):
    """400: the caller sent something the rules reject."""

    status_code = 400

    def __init__(self, kind: ValidationKind, message: str, details: dict | None = None):
        super().__init__(message, details)
        self.kind = kind.value
        self.reason = kind


class InactiveUserFailure(MarketplaceError):
    """403: the caller's account exists but has been deactivated."""

    status_code = 403
    kind = "USER_INACTIVE"

    def __init__(self, message: str = "User account is inactive"):
        super().__init__(message)


class ConflictFailure(MarketplaceError):
    """409: a unique key already exists (username, drone number)."""

    status_code = 409
    kind = "CONFLICT"


class PersistenceKind(str, Enum):
    CONNECTION_TIMEOUT = "CONNECTION_TIMEOUT"
    QUERY_ERROR = "QUERY_ERROR"
    TRANSACTION_ABORT = "TRANSACTION_ABORT"


class PersistenceFailure(MarketplaceError):
    """
    Storage-layer failure. Any open transaction has already been rolled back
    by the time this is raised. Pool exhaustion is a 503, everything else 500.
    """

    def __init__(self, kind: PersistenceKind):
        if kind is PersistenceKind.CONNECTION_TIMEOUT:
            message = "Service temporarily unavailable"
        else:
            message = "Internal server error"
        super().__init__(message)
        self.kind = kind.value
        self.reason = kind
        self.status_code = 503 if kind is PersistenceKind.CONNECTION_TIMEOUT else 500


def service_unavailable() -> tuple[dict, int]:
    """Response for a request that could not get a database connection in time."""
    failure = PersistenceFailure(PersistenceKind.CONNECTION_TIMEOUT)
    return failure.to_dict(), failure.status_code
