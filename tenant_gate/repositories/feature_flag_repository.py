"""Repository for FeatureFlag model operations."""

from sqlalchemy.orm import Session
from tenant_gate.models.feature_flag import FeatureFlag


class FeatureFlagRepository:
    """Repository for FeatureFlag model operations"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_key(self, flag_key: str) -> FeatureFlag | None:
        """
        Get feature flag by key.

        Args:
            flag_key: Feature flag key (e.g. 'scheduling')

        Returns:
            FeatureFlag object or None if not found
        """
        return self.db.query(FeatureFlag).filter(FeatureFlag.key == flag_key).first()

    def get_all(self) -> list[FeatureFlag]:
        """Get all feature flags ordered by key"""
        return self.db.query(FeatureFlag).order_by(FeatureFlag.key).all()

    def is_feature_enabled(
        self, flag_key: str, user_id: str | None = None, org_id: str | None = None
    ) -> bool:
        """
        Decide whether a flag is on for an organization and/or user.

        Reads the current flag row, never a cached copy. Unknown flags
        are off.

        Args:
            flag_key: Feature flag key
            user_id: Acting user, for user allowlists and user rollout
            org_id: Organization, for org allowlists and org rollout

        Returns:
            True if the flag is enabled for this caller
        """
        flag = self.get_by_key(flag_key)
        if flag is None:
            return False
        return flag.to_definition().is_enabled_for(org_id=org_id, user_id=user_id)

    def update(self, flag: FeatureFlag) -> FeatureFlag:
        """
        Persist changes made to a feature flag.

        Args:
            flag: FeatureFlag object with updated fields

        Returns:
            Updated FeatureFlag object
        """
        self.db.commit()
        self.db.refresh(flag)
        return flag
