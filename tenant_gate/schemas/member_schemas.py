from pydantic import BaseModel, Field
from datetime import datetime

from tenant_gate.models.role import MembershipStatus, OrgRole


class MemberResponse(BaseModel):
    """Organization member details"""

    id: int
    org_id: str
    user_id: str
    role: OrgRole
    is_owner: bool
    status: MembershipStatus
    created_at: datetime

    model_config = {"from_attributes": True}


class MemberRoleUpdate(BaseModel):
    """Change a member's role"""

    role: OrgRole = Field(..., description="New role to assign")


class MemberInviteRequest(BaseModel):
    """Invite a user to the organization"""

    user_id: str = Field(..., description="Identity provider user ID to invite", min_length=1)
    role: OrgRole = Field(default=OrgRole.ACTOR, description="Role to offer (default: actor)")


class MemberRemoveResponse(BaseModel):
    """Response after removing a member"""

    message: str
    removed_member_id: int
