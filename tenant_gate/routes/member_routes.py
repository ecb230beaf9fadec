from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from tenant_gate.core.pipeline import AuthorizationResult
from tenant_gate.database import get_db
from tenant_gate.dependencies import authorize
from tenant_gate.models.permission import Action, Resource, permission
from tenant_gate.models.role import MembershipStatus, OrgRole
from tenant_gate.schemas.member_schemas import (
    MemberInviteRequest,
    MemberRemoveResponse,
    MemberResponse,
    MemberRoleUpdate,
)
from tenant_gate.services.member_service import MemberService

router = APIRouter()

MEMBER_ADMIN_ROLES = [OrgRole.OWNER, OrgRole.ADMIN, OrgRole.MANAGER, OrgRole.HR]


@router.get("/{org_id}/members", response_model=list[MemberResponse])
async def list_members(
    role: OrgRole | None = None,
    member_status: MembershipStatus | None = None,
    auth: AuthorizationResult = Depends(
        authorize(permissions=[permission(Resource.STAFF, Action.READ)])
    ),
    db: Session = Depends(get_db),
):
    """
    List members of the organization.

    - **Requires staff:read**
    - Optional filters: role, member_status
    """
    service = MemberService(db)
    return service.list_members(auth.require_tenant(), role=role, status=member_status)


@router.patch("/{org_id}/members/{member_id}/role", response_model=MemberResponse)
async def update_member_role(
    member_id: int,
    role_update: MemberRoleUpdate,
    auth: AuthorizationResult = Depends(
        authorize(permissions=[permission(Resource.STAFF, Action.UPDATE)])
    ),
    db: Session = Depends(get_db),
):
    """
    Change a member's role.

    - **Requires staff:update** (staff:manage implies it)
    - Owner's role can never be changed
    - Only owner can promote to admin; nobody can promote to owner
    """
    service = MemberService(db)
    return service.update_member_role(member_id, role_update.role, auth.require_tenant())


@router.delete(
    "/{org_id}/members/{member_id}",
    response_model=MemberRemoveResponse,
    status_code=status.HTTP_200_OK,
)
async def remove_member(
    member_id: int,
    auth: AuthorizationResult = Depends(authorize(roles=MEMBER_ADMIN_ROLES)),
    db: Session = Depends(get_db),
):
    """
    Remove a member from the organization.

    - **Requires owner, admin, manager or hr**
    - Cannot remove the owner or anyone of equal or higher role
    """
    service = MemberService(db)
    service.remove_member(member_id, auth.require_tenant())

    return {
        "message": "Member removed successfully",
        "removed_member_id": member_id,
    }


@router.post(
    "/{org_id}/invitations",
    response_model=MemberResponse,
    status_code=status.HTTP_201_CREATED,
)
async def invite_member(
    invite_request: MemberInviteRequest,
    auth: AuthorizationResult = Depends(authorize(roles=MEMBER_ADMIN_ROLES)),
    db: Session = Depends(get_db),
):
    """
    Invite a user to the organization.

    - **Requires owner, admin, manager or hr**
    - Only roles below the inviter's can be offered; only owner invites admins
    """
    service = MemberService(db)
    return service.invite_member(invite_request.user_id, invite_request.role, auth.require_tenant())


@router.post("/{org_id}/invitations/accept", response_model=MemberResponse)
async def accept_invitation(
    org_id: str,
    auth: AuthorizationResult = Depends(authorize(skip_tenant=True)),
    db: Session = Depends(get_db),
):
    """
    Accept a pending invitation.

    Authenticated but not org-scoped: the caller is not a member yet.
    """
    service = MemberService(db)
    return service.accept_invitation(org_id, auth.require_principal())
