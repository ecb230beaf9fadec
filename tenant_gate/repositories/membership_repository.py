"""Repository for Membership model operations."""

from sqlalchemy.orm import Session, joinedload
from tenant_gate.models.membership import Membership
from tenant_gate.models.role import MembershipStatus, OrgRole


class MembershipRepository:
    """Repository for Membership model operations"""

    def __init__(self, db: Session):
        self.db = db

    def get_active_membership(self, user_id: str, org_id: str) -> Membership | None:
        """
        Get the active membership of a user in an organization.

        Invited and removed memberships are ignored: they grant no access.

        Args:
            user_id: User ID
            org_id: Organization ID

        Returns:
            Membership object or None if the user has no active membership
        """
        return (
            self.db.query(Membership)
            .filter(
                Membership.user_id == user_id,
                Membership.org_id == org_id,
                Membership.status == MembershipStatus.ACTIVE,
            )
            .first()
        )

    def get_membership(self, user_id: str, org_id: str) -> Membership | None:
        """Get the membership of a user in an organization, whatever its status."""
        return (
            self.db.query(Membership)
            .filter(Membership.user_id == user_id, Membership.org_id == org_id)
            .order_by(Membership.id.desc())
            .first()
        )

    def get_by_id(self, org_id: str, membership_id: int) -> Membership | None:
        """
        Get a membership by ID, scoped to an organization.

        Args:
            org_id: Organization the membership must belong to
            membership_id: Membership ID

        Returns:
            Membership object or None if not found in this organization
        """
        return (
            self.db.query(Membership)
            .filter(Membership.id == membership_id, Membership.org_id == org_id)
            .first()
        )

    def get_org_members(
        self,
        org_id: str,
        role: OrgRole | None = None,
        status: MembershipStatus | None = None,
    ) -> list[Membership]:
        """
        Get memberships of an organization, optionally filtered.

        Args:
            org_id: Organization ID
            role: Only memberships with this role
            status: Only memberships with this status

        Returns:
            List of Membership objects ordered by ID
        """
        query = self.db.query(Membership).filter(Membership.org_id == org_id)
        if role is not None:
            query = query.filter(Membership.role == role)
        if status is not None:
            query = query.filter(Membership.status == status)
        return query.order_by(Membership.id).all()

    def get_user_active_memberships(self, user_id: str) -> list[Membership]:
        """
        Get all active memberships of a user with their organizations loaded.

        Args:
            user_id: User ID

        Returns:
            List of active Membership objects, organization eagerly joined
        """
        return (
            self.db.query(Membership)
            .options(joinedload(Membership.organization))
            .filter(
                Membership.user_id == user_id,
                Membership.status == MembershipStatus.ACTIVE,
            )
            .order_by(Membership.id)
            .all()
        )

    def create(self, membership: Membership) -> Membership:
        """
        Create a new membership.

        Args:
            membership: Membership object to create

        Returns:
            Created Membership object with ID populated
        """
        self.db.add(membership)
        self.db.commit()
        self.db.refresh(membership)
        return membership

    def update(self, membership: Membership) -> Membership:
        """
        Persist changes made to a membership.

        Args:
            membership: Membership object to update

        Returns:
            Updated Membership object
        """
        self.db.commit()
        self.db.refresh(membership)
        return membership

    def update_role(self, membership: Membership, new_role: OrgRole) -> Membership:
        """Update a member's role."""
        membership.role = new_role
        return self.update(membership)

    def set_status(self, membership: Membership, status: MembershipStatus) -> Membership:
        """Move a membership to a new status (soft delete uses REMOVED)."""
        membership.status = status
        return self.update(membership)
