from pydantic import BaseModel

from tenant_gate.models.organization import SubscriptionTier
from tenant_gate.models.role import OrgRole


class UserOrganizationResponse(BaseModel):
    """Organization the user belongs to, with the user's role in it"""

    org_id: str
    org_name: str
    org_slug: str
    role: OrgRole
    is_owner: bool


class TenantContextResponse(BaseModel):
    """Resolved access for the current user in the current organization"""

    org_id: str
    org_name: str
    org_slug: str
    user_id: str
    role: OrgRole
    is_owner: bool
    is_super_admin: bool
    permissions: list[str]

    model_config = {"from_attributes": True}


class AttractionResponse(BaseModel):
    """Attraction details"""

    id: str
    org_id: str
    name: str
    slug: str

    model_config = {"from_attributes": True}


class SubscriptionResponse(BaseModel):
    """Subscription tier of an organization and its bundled features"""

    org_id: str
    tier: SubscriptionTier
    features: list[str]
