from sqlalchemy.orm import Session

from tenant_gate.core.exceptions import ErrorCode, NotFoundException
from tenant_gate.models.attraction import Attraction
from tenant_gate.models.principal import Principal
from tenant_gate.models.tenant_context import TenantContext
from tenant_gate.services.feature_service import FeatureService
from tenant_gate.services.tenancy_service import TenancyService


class OrganizationService:
    """Read-only organization views built on the tenant resolver"""

    def __init__(self, db: Session):
        self.db = db
        self.tenancy = TenancyService(db)

    def list_user_organizations(self, principal: Principal) -> list[dict]:
        """
        List all organizations the principal is an active member of.

        Super admins see only their own memberships here; the bypass
        applies to org-scoped routes, not to this listing.
        """
        return self.tenancy.get_user_organizations(principal.id)

    def get_attraction(self, identifier: str, context: TenantContext) -> Attraction:
        """
        Resolve an attraction of the current organization by ID or slug.

        Raises:
            NotFoundException: ATTRACTION_NOT_FOUND
        """
        attraction = self.tenancy.resolve_attraction(context.org_id, identifier)
        if not attraction:
            raise NotFoundException("Attraction not found", code=ErrorCode.ATTRACTION_NOT_FOUND)
        return attraction

    def get_subscription(self, context: TenantContext, features: FeatureService) -> dict:
        """Subscription tier of the current organization and what it bundles."""
        tier = features.get_org_tier(context.org_id)
        return {
            "org_id": context.org_id,
            "tier": tier,
            "features": features.get_tier_features(tier),
        }
