from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING

from tenant_gate.models.base import Base, TimestampMixin, new_uuid

if TYPE_CHECKING:
    from tenant_gate.models.organization import Organization


class Attraction(Base, TimestampMixin):
    """A venue run by an organization (haunted house, maze, escape room)."""

    __tablename__ = "attractions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    org_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(100), nullable=False)

    organization: Mapped["Organization"] = relationship("Organization", back_populates="attractions")

    __table_args__ = (
        UniqueConstraint("org_id", "slug", name="uq_attraction_org_slug"),
    )

    def __repr__(self) -> str:
        return f"<Attraction(id={self.id}, org_id={self.org_id}, slug='{self.slug}')>"
