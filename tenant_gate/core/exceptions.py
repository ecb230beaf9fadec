from enum import Enum as PyEnum
from typing import Any


class ErrorCode(str, PyEnum):
    """Stable error codes returned to clients in the 'code' field."""

    # Authentication
    AUTH_TOKEN_MISSING = "AUTH_TOKEN_MISSING"
    AUTH_TOKEN_INVALID = "AUTH_TOKEN_INVALID"
    AUTH_REQUIRED = "AUTH_REQUIRED"

    # Tenant resolution
    ORG_FORBIDDEN = "ORG_FORBIDDEN"
    ORG_NOT_FOUND = "ORG_NOT_FOUND"
    TENANT_CONTEXT_MISSING = "TENANT_CONTEXT_MISSING"

    # Authorization
    FEATURE_NOT_ENABLED = "FEATURE_NOT_ENABLED"
    ROLE_REQUIRED = "ROLE_REQUIRED"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    SUPER_ADMIN_REQUIRED = "SUPER_ADMIN_REQUIRED"

    # Member administration
    MEMBER_NOT_FOUND = "MEMBER_NOT_FOUND"
    MEMBER_FORBIDDEN = "MEMBER_FORBIDDEN"
    MEMBER_ALREADY_EXISTS = "MEMBER_ALREADY_EXISTS"
    ORG_OWNER_PROTECTED = "ORG_OWNER_PROTECTED"
    ROLE_ESCALATION = "ROLE_ESCALATION"
    INVITATION_INVALID = "INVITATION_INVALID"

    # Lookups
    ATTRACTION_NOT_FOUND = "ATTRACTION_NOT_FOUND"
    FLAG_NOT_FOUND = "FLAG_NOT_FOUND"
    FLAG_UPDATE_INVALID = "FLAG_UPDATE_INVALID"


class TenantGateException(Exception):
    """
    Base exception for tenant gate.

    Every rejection carries a stable code and optional machine-readable
    details (missing features, required roles, ...) for client messaging.
    """

    default_code: ErrorCode | None = None

    def __init__(self, message: str, code: ErrorCode | None = None, **details: Any):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"detail": self.message}
        if self.code is not None:
            body["code"] = self.code.value
        body.update(self.details)
        return body


class UnauthorizedException(TenantGateException):
    """Raised when JWT validation fails"""

    default_code = ErrorCode.AUTH_TOKEN_INVALID


class NotFoundException(TenantGateException):
    """Raised when resource not found"""

    pass


class ForbiddenException(TenantGateException):
    """Raised when a known caller lacks access to an organization or capability"""

    pass


class ValidationException(TenantGateException):
    """Raised for business logic validation errors"""

    pass
