import logging

from sqlalchemy.orm import Session

from tenant_gate.core.exceptions import (
    ErrorCode,
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from tenant_gate.models.membership import Membership
from tenant_gate.models.principal import Principal
from tenant_gate.models.role import (
    MembershipStatus,
    OrgRole,
    can_invite_to_role,
    can_manage,
    can_modify_role,
)
from tenant_gate.models.tenant_context import TenantContext
from tenant_gate.repositories.membership_repository import MembershipRepository
from tenant_gate.repositories.organization_repository import OrganizationRepository
from tenant_gate.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


class MemberService:
    """Service layer for organization member management"""

    def __init__(self, db: Session):
        self.db = db
        self.membership_repo = MembershipRepository(db)
        self.org_repo = OrganizationRepository(db)
        self.user_repo = UserRepository(db)

    def list_members(
        self,
        context: TenantContext,
        role: OrgRole | None = None,
        status: MembershipStatus | None = None,
    ) -> list[Membership]:
        """
        List members of the current organization.

        Args:
            context: Tenant context
            role: Only members with this role
            status: Only members with this status (all statuses if None)

        Returns:
            List of memberships
        """
        return self.membership_repo.get_org_members(context.org_id, role=role, status=status)

    def _get_member(self, membership_id: int, context: TenantContext) -> Membership:
        membership = self.membership_repo.get_by_id(context.org_id, membership_id)
        if not membership:
            raise NotFoundException("Member not found", code=ErrorCode.MEMBER_NOT_FOUND)
        return membership

    def update_member_role(
        self, membership_id: int, new_role: OrgRole, context: TenantContext
    ) -> Membership:
        """
        Change a member's role.

        The owner's membership can never be changed, nobody is promoted to
        owner, only the owner promotes to admin, and the actor must outrank
        both the member's current role and the new one.

        Args:
            membership_id: Membership to update
            new_role: Role to assign
            context: Tenant context of the actor

        Returns:
            Updated membership

        Raises:
            NotFoundException: MEMBER_NOT_FOUND
            ForbiddenException: ORG_OWNER_PROTECTED or ROLE_ESCALATION
        """
        membership = self._get_member(membership_id, context)

        if not can_modify_role(context.role, membership.role, new_role, membership.is_owner):
            if membership.is_owner:
                raise ForbiddenException("Cannot modify owner role", code=ErrorCode.ORG_OWNER_PROTECTED)
            if new_role == OrgRole.ADMIN and context.role != OrgRole.OWNER:
                raise ForbiddenException("Only owner can promote to admin", code=ErrorCode.ROLE_ESCALATION)
            raise ForbiddenException("Cannot assign this role", code=ErrorCode.ROLE_ESCALATION)

        logger.info(
            "Member role changed",
            extra={"org_id": context.org_id, "user_id": context.user_id, "roles": [membership.role.value, new_role.value]},
        )
        return self.membership_repo.update_role(membership, new_role)

    def remove_member(self, membership_id: int, context: TenantContext) -> Membership:
        """
        Remove a member from the organization (soft delete).

        Raises:
            NotFoundException: MEMBER_NOT_FOUND
            ForbiddenException: ORG_OWNER_PROTECTED, or MEMBER_FORBIDDEN when
                the actor does not outrank the member
        """
        membership = self._get_member(membership_id, context)

        if membership.is_owner:
            raise ForbiddenException("Cannot remove organization owner", code=ErrorCode.ORG_OWNER_PROTECTED)

        if not can_manage(context.role, membership.role):
            raise ForbiddenException(
                "Cannot remove member with equal or higher role", code=ErrorCode.MEMBER_FORBIDDEN
            )

        return self.membership_repo.set_status(membership, MembershipStatus.REMOVED)

    def invite_member(self, user_id: str, role: OrgRole, context: TenantContext) -> Membership:
        """
        Invite a user to the organization with a role.

        The invitation is an INVITED membership; it grants nothing until the
        user accepts it. A previously removed member is re-invited in place.

        Raises:
            ForbiddenException: ROLE_ESCALATION if the actor may not offer this role
            ValidationException: MEMBER_ALREADY_EXISTS if active or already invited
        """
        if not can_invite_to_role(context.role, role):
            raise ForbiddenException("Cannot invite to this role", code=ErrorCode.ROLE_ESCALATION)

        user = self.user_repo.get_or_create(user_id)

        existing = self.membership_repo.get_membership(user.id, context.org_id)
        if existing and existing.status in (MembershipStatus.ACTIVE, MembershipStatus.INVITED):
            raise ValidationException(
                "User is already a member or has a pending invitation",
                code=ErrorCode.MEMBER_ALREADY_EXISTS,
            )

        if existing:
            existing.role = role
            existing.status = MembershipStatus.INVITED
            return self.membership_repo.update(existing)

        membership = Membership(
            org_id=context.org_id,
            user_id=user.id,
            role=role,
            is_owner=False,
            status=MembershipStatus.INVITED,
        )
        return self.membership_repo.create(membership)

    def accept_invitation(self, org_identifier: str, principal: Principal) -> Membership:
        """
        Accept a pending invitation, activating the membership.

        Raises:
            NotFoundException: ORG_NOT_FOUND
            ValidationException: INVITATION_INVALID if nothing is pending
        """
        org = self.org_repo.get_by_identifier(org_identifier)
        if not org:
            raise NotFoundException("Organization not found", code=ErrorCode.ORG_NOT_FOUND)

        membership = self.membership_repo.get_membership(principal.id, org.id)
        if not membership or membership.status != MembershipStatus.INVITED:
            raise ValidationException("No pending invitation", code=ErrorCode.INVITATION_INVALID)

        return self.membership_repo.set_status(membership, MembershipStatus.ACTIVE)
