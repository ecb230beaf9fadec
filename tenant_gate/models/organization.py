"""Organization model: the tenant isolation boundary."""

from enum import Enum as PyEnum

from sqlalchemy import Enum, String
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING

from tenant_gate.models.base import Base, TimestampMixin, new_uuid

if TYPE_CHECKING:
    from tenant_gate.models.attraction import Attraction
    from tenant_gate.models.membership import Membership


class SubscriptionTier(str, PyEnum):
    FREE = "free"
    PRO = "pro"
    ENTERPRISE = "enterprise"


class Organization(Base, TimestampMixin):
    """
    Multi-tenant isolation boundary.

    An organization is an attraction operator. Staff reach its data only
    through an active membership with a role (owner, admin, manager, ...).

    Examples:
    - "Nightmare Manor LLC" - runs two haunted houses
    - "Pumpkin Patch Co" - seasonal farm with a corn maze
    """

    __tablename__ = "organizations"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(100), nullable=False, unique=True, index=True)
    subscription_tier: Mapped[SubscriptionTier] = mapped_column(
        Enum(SubscriptionTier, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=SubscriptionTier.FREE,
    )

    # Relationships
    memberships: Mapped[list["Membership"]] = relationship(
        "Membership",
        back_populates="organization",
        cascade="all, delete-orphan",
    )
    attractions: Mapped[list["Attraction"]] = relationship(
        "Attraction",
        back_populates="organization",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Organization(id={self.id}, slug='{self.slug}')>"
