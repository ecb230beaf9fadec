"""
Per-request authorization pipeline.

The pipeline is an ordered tuple of stage functions run one after another
by a single executor. Later stages read what earlier ones attached to the
request state (the principal, then the tenant context), so the order is
part of the contract and is checked by tests:

    authenticate -> require_platform_admin -> resolve_tenant
        -> feature_gate -> role_gate -> permission_gate

Each stage either returns (pass) or raises a TenantGateException (reject).
A stage with nothing declared for the route passes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from tenant_gate.core.exceptions import ErrorCode, ForbiddenException
from tenant_gate.models.principal import Principal
from tenant_gate.models.role import OrgRole
from tenant_gate.models.tenant_context import TenantContext

if TYPE_CHECKING:
    from tenant_gate.services.auth_service import AuthService
    from tenant_gate.services.feature_service import FeatureService
    from tenant_gate.services.tenancy_service import TenancyService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RouteRequirements:
    """
    What a route declares about access.

    Attributes:
        public: Skip authentication entirely
        skip_tenant: Authenticated but not org-scoped even if an org is in the URL
        super_admin: Only platform super admins
        features: Feature flags that must all be enabled for the organization
        roles: Acceptable organization roles (any of)
        permissions: Acceptable permissions (any of)
    """

    public: bool = False
    skip_tenant: bool = False
    super_admin: bool = False
    features: tuple[str, ...] = ()
    roles: tuple[OrgRole, ...] = ()
    permissions: tuple[str, ...] = ()


@dataclass
class AuthorizationState:
    """Request-scoped state threaded through the stages. Never shared."""

    token: str | None = None
    org_identifier: str | None = None
    principal: Principal | None = None
    tenant: TenantContext | None = None


@dataclass(frozen=True)
class AuthorizationServices:
    auth: "AuthService"
    tenancy: "TenancyService"
    features: "FeatureService"


@dataclass(frozen=True)
class AuthorizationResult:
    """What a route handler receives once every stage has passed."""

    principal: Principal | None
    tenant: TenantContext | None

    def require_principal(self) -> Principal:
        if self.principal is None:
            raise ForbiddenException("Authentication required", code=ErrorCode.AUTH_REQUIRED)
        return self.principal

    def require_tenant(self) -> TenantContext:
        if self.tenant is None:
            logger.error(
                "Handler needs a tenant context the route does not resolve",
                extra={"code": ErrorCode.TENANT_CONTEXT_MISSING.value},
            )
            raise ForbiddenException("Tenant context not resolved", code=ErrorCode.TENANT_CONTEXT_MISSING)
        return self.tenant


Stage = Callable[[AuthorizationState, RouteRequirements, AuthorizationServices], None]


def _deny(message: str, code: ErrorCode, state: AuthorizationState, **details) -> ForbiddenException:
    logger.info(
        message,
        extra={
            "code": code.value,
            "user_id": state.principal.id if state.principal else None,
            "org_id": state.tenant.org_id if state.tenant else state.org_identifier,
            **details,
        },
    )
    return ForbiddenException(message, code=code, **details)


def _require_tenant(state: AuthorizationState, stage: str) -> TenantContext:
    if state.tenant is None:
        # Route is misconfigured: a role/permission check without tenant resolution
        logger.error(
            "Tenant context missing for %s", stage,
            extra={"code": ErrorCode.TENANT_CONTEXT_MISSING.value, "stage": stage},
        )
        raise ForbiddenException("Tenant context not resolved", code=ErrorCode.TENANT_CONTEXT_MISSING)
    return state.tenant


def authenticate(state: AuthorizationState, requirements: RouteRequirements, services: AuthorizationServices) -> None:
    """Validate the bearer token and attach the principal. Skipped for public routes."""
    if requirements.public:
        return
    state.principal = services.auth.authenticate(state.token)


def require_platform_admin(
    state: AuthorizationState, requirements: RouteRequirements, services: AuthorizationServices
) -> None:
    """Reject everyone but platform super admins on admin routes."""
    if not requirements.super_admin:
        return
    if state.principal is None:
        raise _deny("Authentication required", ErrorCode.AUTH_REQUIRED, state)
    if not state.principal.is_super_admin:
        raise _deny("Super admin access required", ErrorCode.SUPER_ADMIN_REQUIRED, state)


def resolve_tenant(state: AuthorizationState, requirements: RouteRequirements, services: AuthorizationServices) -> None:
    """Attach the tenant context for org-scoped routes."""
    if requirements.skip_tenant or not state.org_identifier:
        return
    if state.principal is None:
        raise _deny("Authentication required", ErrorCode.AUTH_REQUIRED, state)
    state.tenant = services.tenancy.resolve_tenant_context(state.principal, state.org_identifier)


def feature_gate(state: AuthorizationState, requirements: RouteRequirements, services: AuthorizationServices) -> None:
    """
    Require every declared feature to be enabled for the organization.

    Super admins bypass the gate. The rejection names the missing features
    and, when the first one is tier-restricted, the tier to upgrade to.
    """
    if not requirements.features:
        return
    tenant = state.tenant
    if tenant is not None and tenant.is_super_admin:
        return

    org_id = tenant.org_id if tenant is not None else None
    user_id = tenant.user_id if tenant is not None else (state.principal.id if state.principal else None)

    missing = services.features.disabled_features(list(requirements.features), org_id, user_id)
    if not missing:
        return

    tier = services.features.get_feature_tier(missing[0])
    message = (
        f"This feature requires a {tier} plan or higher"
        if tier
        else f"Feature not enabled: {', '.join(missing)}"
    )
    raise _deny(message, ErrorCode.FEATURE_NOT_ENABLED, state, features=missing, tier=tier)


def role_gate(state: AuthorizationState, requirements: RouteRequirements, services: AuthorizationServices) -> None:
    """Require the caller's organization role to be one of the declared roles."""
    if not requirements.roles:
        return
    tenant = _require_tenant(state, "role_gate")
    if tenant.is_super_admin or tenant.role in requirements.roles:
        return
    roles = [role.value for role in requirements.roles]
    raise _deny(f"Requires one of roles: {', '.join(roles)}", ErrorCode.ROLE_REQUIRED, state, roles=roles)


def permission_gate(
    state: AuthorizationState, requirements: RouteRequirements, services: AuthorizationServices
) -> None:
    """Require at least one of the declared permissions ('*' satisfies any)."""
    if not requirements.permissions:
        return
    tenant = _require_tenant(state, "permission_gate")
    if tenant.has_any_permission(requirements.permissions):
        return
    permissions = list(requirements.permissions)
    raise _deny(
        f"Missing permissions: {', '.join(permissions)}",
        ErrorCode.PERMISSION_DENIED,
        state,
        permissions=permissions,
    )


DEFAULT_STAGES: tuple[Stage, ...] = (
    authenticate,
    require_platform_admin,
    resolve_tenant,
    feature_gate,
    role_gate,
    permission_gate,
)


class AuthorizationPipeline:
    """Runs the stages strictly in order; the first rejection ends the request."""

    def __init__(self, stages: tuple[Stage, ...] = DEFAULT_STAGES):
        self.stages = tuple(stages)

    @property
    def stage_names(self) -> tuple[str, ...]:
        return tuple(stage.__name__ for stage in self.stages)

    def run(
        self,
        state: AuthorizationState,
        requirements: RouteRequirements,
        services: AuthorizationServices,
    ) -> AuthorizationResult:
        for stage in self.stages:
            stage(state, requirements, services)
        return AuthorizationResult(principal=state.principal, tenant=state.tenant)
