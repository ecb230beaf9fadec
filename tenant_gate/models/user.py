from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING

from tenant_gate.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from tenant_gate.models.membership import Membership


class User(Base, TimestampMixin):
    """
    Tracks users from the identity provider.

    The primary key is the 'sub' claim from the JWT; no credentials are
    stored. Auto-created on first API request with a valid JWT.
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    # Platform-level flag, independent of any organization membership
    is_super_admin: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Relationships
    memberships: Mapped[list["Membership"]] = relationship(
        "Membership",
        back_populates="user",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, super_admin={self.is_super_admin})>"
