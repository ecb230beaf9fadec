from functools import lru_cache
from typing import Iterable

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from tenant_gate.config import settings
from tenant_gate.core.cache import FlagCache, TTLFlagCache
from tenant_gate.core.pipeline import (
    AuthorizationPipeline,
    AuthorizationResult,
    AuthorizationServices,
    AuthorizationState,
    RouteRequirements,
)
from tenant_gate.database import get_db
from tenant_gate.models.permission import WILDCARD_PERMISSION, parse_permission
from tenant_gate.models.principal import Principal
from tenant_gate.models.role import OrgRole
from tenant_gate.models.tenant_context import TenantContext
from tenant_gate.services.auth_service import AuthService
from tenant_gate.services.feature_service import FeatureService
from tenant_gate.services.tenancy_service import TenancyService

# auto_error=False so a missing header surfaces as AUTH_TOKEN_MISSING, not FastAPI's default
security = HTTPBearer(auto_error=False)

# Path parameter that makes a route org-scoped
ORG_PATH_PARAM = "org_id"


@lru_cache
def get_flag_cache() -> FlagCache:
    """Process-wide flag definition cache. Override in tests to swap it out."""
    return TTLFlagCache(ttl_seconds=settings.FEATURE_FLAG_CACHE_TTL_SECONDS)


@lru_cache
def get_pipeline() -> AuthorizationPipeline:
    return AuthorizationPipeline()


def get_feature_service(
    db: Session = Depends(get_db), cache: FlagCache = Depends(get_flag_cache)
) -> FeatureService:
    return FeatureService(db, cache)


def get_authorization_services(
    db: Session = Depends(get_db),
    features: FeatureService = Depends(get_feature_service),
) -> AuthorizationServices:
    return AuthorizationServices(
        auth=AuthService(db),
        tenancy=TenancyService(db),
        features=features,
    )


def _validated_permissions(permissions: Iterable[str]) -> tuple[str, ...]:
    result = tuple(permissions)
    for value in result:
        if value != WILDCARD_PERMISSION and parse_permission(value) is None:
            raise ValueError(f"Unknown permission: {value!r}")
    return result


def authorize(
    *,
    permissions: Iterable[str] = (),
    roles: Iterable[OrgRole | str] = (),
    features: Iterable[str] = (),
    public: bool = False,
    skip_tenant: bool = False,
    super_admin: bool = False,
):
    """
    FastAPI dependency factory running the authorization pipeline for a route.

    Requirements are declared once, at import time; unknown roles or
    permissions fail there rather than silently never matching.

    Usage:
        @router.get("/{org_id}/schedules")
        async def list_schedules(
            auth: AuthorizationResult = Depends(
                authorize(features=["scheduling"], roles=["owner", "admin", "manager"])
            ),
        ):
            tenant = auth.require_tenant()

    Args:
        permissions: Any one of these permissions is enough
        roles: Any one of these organization roles is enough
        features: Every one of these feature flags must be enabled
        public: Skip authentication (no principal will be attached)
        skip_tenant: Authenticated but not org-scoped, even with {org_id} in the path
        super_admin: Only platform super admins

    Returns:
        Dependency returning the AuthorizationResult for the request
    """
    requirements = RouteRequirements(
        public=public,
        skip_tenant=skip_tenant,
        super_admin=super_admin,
        features=tuple(features),
        roles=tuple(OrgRole(role) for role in roles),
        permissions=_validated_permissions(permissions),
    )

    async def run_authorization(
        request: Request,
        credentials: HTTPAuthorizationCredentials | None = Depends(security),
        services: AuthorizationServices = Depends(get_authorization_services),
        pipeline: AuthorizationPipeline = Depends(get_pipeline),
    ) -> AuthorizationResult:
        state = AuthorizationState(
            token=credentials.credentials if credentials else None,
            org_identifier=request.path_params.get(ORG_PATH_PARAM),
        )
        result = pipeline.run(state, requirements, services)
        request.state.authorization = result
        return result

    run_authorization.requirements = requirements  # type: ignore[attr-defined]
    return run_authorization


async def get_current_principal(
    auth: AuthorizationResult = Depends(authorize()),
) -> Principal:
    """Authenticated caller for routes with no other requirements."""
    return auth.require_principal()


async def get_tenant_context(
    auth: AuthorizationResult = Depends(authorize()),
) -> TenantContext:
    """
    Tenant context for org-scoped routes with no other requirements.

    Raises TENANT_CONTEXT_MISSING when the route has no {org_id} in its path.
    """
    return auth.require_tenant()
