"""Organization membership linking users to organizations with roles."""

from sqlalchemy import Boolean, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING

from tenant_gate.models.base import Base, TimestampMixin
from tenant_gate.models.role import MembershipStatus, OrgRole

if TYPE_CHECKING:
    from tenant_gate.models.organization import Organization
    from tenant_gate.models.user import User


class Membership(Base, TimestampMixin):
    """
    Join table linking users to organizations with a role and a status.

    Only ACTIVE memberships grant access. INVITED rows wait for the user to
    accept; REMOVED rows are kept for history.

    Constraints:
    - At most one ACTIVE membership per (org_id, user_id); assumed by the
      tenant resolver, enforced by the member service when inviting
    - Exactly one membership per organization has is_owner=True, set when
      the organization is created
    """

    __tablename__ = "org_memberships"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    org_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role: Mapped[OrgRole] = mapped_column(
        Enum(OrgRole, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=OrgRole.ACTOR,
    )
    is_owner: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    status: Mapped[MembershipStatus] = mapped_column(
        Enum(MembershipStatus, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=MembershipStatus.ACTIVE,
    )

    # Relationships
    organization: Mapped["Organization"] = relationship("Organization", back_populates="memberships")
    user: Mapped["User"] = relationship("User", back_populates="memberships")

    def __repr__(self) -> str:
        return (
            f"<Membership(org_id={self.org_id}, user_id={self.user_id}, "
            f"role={self.role.value}, status={self.status.value})>"
        )
