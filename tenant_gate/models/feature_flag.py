"""Feature flag model and the rollout decision."""

import hashlib
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from sqlalchemy import JSON, Boolean, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from tenant_gate.models.base import Base, TimestampMixin


def rollout_bucket(flag_key: str, entity_id: str) -> int:
    """
    Stable bucket in [0, 100) for a (flag, entity) pair.

    The same pair always lands in the same bucket, so an organization or
    user never flickers in and out of a partial rollout. Keying on the flag
    as well spreads each flag's cohort independently.
    """
    digest = hashlib.sha256(f"{flag_key}:{entity_id}".encode("utf-8")).hexdigest()
    return int(digest[:8], 16) % 100


@dataclass(frozen=True)
class FlagDefinition:
    """Immutable snapshot of a feature flag row, safe to share across requests."""

    key: str
    enabled: bool
    rollout_percentage: int = 100
    org_ids: frozenset[str] = frozenset()
    user_ids: frozenset[str] = frozenset()
    metadata: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    name: str | None = None
    description: str | None = None

    @property
    def tier(self) -> str | None:
        tier = self.metadata.get("tier")
        return str(tier) if tier else None

    @property
    def is_module(self) -> bool:
        return self.metadata.get("module") is True

    def is_enabled_for(self, org_id: str | None = None, user_id: str | None = None) -> bool:
        """
        Decide whether this flag is on for an organization and/or user.

        Order:
        1. Globally disabled flags are off for everyone
        2. Allowlisted organizations and users are always on
        3. Otherwise the organization (or, without one, the user) is bucketed
           and compared against rollout_percentage; 100 means everyone
        """
        if not self.enabled:
            return False

        if org_id is not None and org_id in self.org_ids:
            return True
        if user_id is not None and user_id in self.user_ids:
            return True

        if self.rollout_percentage >= 100:
            return True
        if self.rollout_percentage <= 0:
            return False

        entity_id = org_id or user_id
        if entity_id is None:
            return False
        return rollout_bucket(self.key, entity_id) < self.rollout_percentage


class FeatureFlag(Base, TimestampMixin):
    """
    Feature flag edited by platform administrators.

    metadata carries descriptive keys such as {"tier": "pro", "module": true}
    used for upsell messaging; it never affects the decision itself.
    """

    __tablename__ = "feature_flags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    key: Mapped[str] = mapped_column(String(100), nullable=False, unique=True, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    rollout_percentage: Mapped[int] = mapped_column(Integer, nullable=False, default=100)
    org_ids: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    user_ids: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    # "metadata" is reserved on declarative classes
    flag_metadata: Mapped[dict[str, Any]] = mapped_column("metadata", JSON, nullable=False, default=dict)

    def to_definition(self) -> FlagDefinition:
        return FlagDefinition(
            key=self.key,
            enabled=bool(self.enabled),
            rollout_percentage=self.rollout_percentage if self.rollout_percentage is not None else 100,
            org_ids=frozenset(self.org_ids or ()),
            user_ids=frozenset(self.user_ids or ()),
            metadata=MappingProxyType(dict(self.flag_metadata or {})),
            name=self.name,
            description=self.description,
        )

    def __repr__(self) -> str:
        return f"<FeatureFlag(key='{self.key}', enabled={self.enabled}, rollout={self.rollout_percentage})>"
