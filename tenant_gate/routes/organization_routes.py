from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from tenant_gate.core.pipeline import AuthorizationResult
from tenant_gate.database import get_db
from tenant_gate.dependencies import (
    authorize,
    get_current_principal,
    get_feature_service,
    get_tenant_context,
)
from tenant_gate.models.permission import Action, Resource, permission
from tenant_gate.models.principal import Principal
from tenant_gate.models.tenant_context import TenantContext
from tenant_gate.schemas.feature_schemas import FeatureStatusResponse
from tenant_gate.schemas.organization_schemas import (
    AttractionResponse,
    SubscriptionResponse,
    TenantContextResponse,
    UserOrganizationResponse,
)
from tenant_gate.services.feature_service import FeatureService
from tenant_gate.services.organization_service import OrganizationService

router = APIRouter()


@router.get("", response_model=list[UserOrganizationResponse])
async def list_user_organizations(
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """
    List all organizations the authenticated user belongs to.

    Not org-scoped: useful for organization switching.
    """
    service = OrganizationService(db)
    return service.list_user_organizations(principal)


@router.get("/{org_id}", response_model=TenantContextResponse)
async def get_current_access(
    tenant: TenantContext = Depends(get_tenant_context),
):
    """
    Get the caller's resolved access in an organization.

    The org_id may be the organization's ID or its slug. Clients use the
    returned role and permissions to decide what to render.
    """
    return TenantContextResponse(
        org_id=tenant.org_id,
        org_name=tenant.org_name,
        org_slug=tenant.org_slug,
        user_id=tenant.user_id,
        role=tenant.role,
        is_owner=tenant.is_owner,
        is_super_admin=tenant.is_super_admin,
        permissions=list(tenant.permissions),
    )


@router.get("/{org_id}/attractions/{attraction_id}", response_model=AttractionResponse)
async def get_attraction(
    attraction_id: str,
    auth: AuthorizationResult = Depends(
        authorize(permissions=[permission(Resource.HAUNT, Action.READ)])
    ),
    db: Session = Depends(get_db),
):
    """
    Get an attraction by ID or slug.

    - **Requires haunt:read**
    """
    service = OrganizationService(db)
    return service.get_attraction(attraction_id, auth.require_tenant())


@router.get("/{org_id}/subscription", response_model=SubscriptionResponse)
async def get_subscription(
    auth: AuthorizationResult = Depends(
        authorize(permissions=[permission(Resource.ORGANIZATION, Action.READ)])
    ),
    features: FeatureService = Depends(get_feature_service),
    db: Session = Depends(get_db),
):
    """Get the organization's subscription tier and bundled features."""
    service = OrganizationService(db)
    return service.get_subscription(auth.require_tenant(), features)


@router.get("/{org_id}/features/{feature_key}", response_model=FeatureStatusResponse)
async def get_feature_status(
    feature_key: str,
    tenant: TenantContext = Depends(get_tenant_context),
    features: FeatureService = Depends(get_feature_service),
):
    """
    Check whether a feature is enabled for the caller in this organization.

    Always answers with a boolean; unknown flags are simply disabled.
    """
    return FeatureStatusResponse(
        key=feature_key,
        enabled=tenant.is_super_admin or features.is_enabled(feature_key, tenant.org_id, tenant.user_id),
        tier=features.get_feature_tier(feature_key),
        module=features.is_module_flag(feature_key),
    )
