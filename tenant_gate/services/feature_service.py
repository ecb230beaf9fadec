import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tenant_gate.core.cache import FlagCache
from tenant_gate.core.exceptions import ErrorCode, ValidationException
from tenant_gate.models.feature_flag import FeatureFlag, FlagDefinition
from tenant_gate.models.organization import SubscriptionTier
from tenant_gate.repositories.feature_flag_repository import FeatureFlagRepository
from tenant_gate.repositories.organization_repository import OrganizationRepository

logger = logging.getLogger(__name__)

_FREE_FEATURES = ("ticketing", "checkin", "time_tracking", "notifications")
_PRO_FEATURES = _FREE_FEATURES + (
    "scheduling",
    "inventory",
    "analytics_pro",
    "storefronts",
    "media_uploads",
)
_ENTERPRISE_FEATURES = _PRO_FEATURES + (
    "virtual_queue",
    "sms_notifications",
    "custom_domains",
)

# Features bundled with each subscription tier
TIER_FEATURES: dict[SubscriptionTier, tuple[str, ...]] = {
    SubscriptionTier.FREE: _FREE_FEATURES,
    SubscriptionTier.PRO: _PRO_FEATURES,
    SubscriptionTier.ENTERPRISE: _ENTERPRISE_FEATURES,
}


class FeatureService:
    """
    Feature flag evaluation for organizations and users.

    Decisions always go to the database decision function and are never
    cached, since allowlists and rollout depend on who is asking. Flag
    definitions (used for tier and module metadata) are cached per key in
    the injected FlagCache. Every failure reads as "disabled".
    """

    def __init__(self, db: Session, cache: FlagCache):
        self.db = db
        self.cache = cache
        self.flag_repo = FeatureFlagRepository(db)
        self.org_repo = OrganizationRepository(db)

    def is_enabled(self, flag_key: str, org_id: str | None = None, user_id: str | None = None) -> bool:
        """
        Check if a feature is enabled for an organization and/or user.

        Args:
            flag_key: Feature flag key (e.g. 'scheduling', 'checkin')
            org_id: Organization, for org allowlists and rollout
            user_id: User, for user allowlists and rollout

        Returns:
            True if enabled; False if disabled, unknown, or the lookup failed
        """
        try:
            return self.flag_repo.is_feature_enabled(flag_key, user_id=user_id, org_id=org_id) is True
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.warning(
                "Feature flag lookup failed, treating as disabled",
                extra={"flag_key": flag_key, "org_id": org_id, "user_id": user_id, "error": str(e)},
            )
            return False

    def are_all_enabled(self, flag_keys: list[str], org_id: str | None = None, user_id: str | None = None) -> bool:
        """Check if every one of the features is enabled."""
        results = [self.is_enabled(key, org_id, user_id) for key in flag_keys]
        return all(results)

    def is_any_enabled(self, flag_keys: list[str], org_id: str | None = None, user_id: str | None = None) -> bool:
        """Check if at least one of the features is enabled."""
        results = [self.is_enabled(key, org_id, user_id) for key in flag_keys]
        return any(results)

    def disabled_features(self, flag_keys: list[str], org_id: str | None = None, user_id: str | None = None) -> list[str]:
        """The subset of flag_keys that is not enabled, in the given order."""
        return [key for key in flag_keys if not self.is_enabled(key, org_id, user_id)]

    def get_flag(self, flag_key: str) -> FlagDefinition | None:
        """
        Get a flag definition by key (cached).

        Not-found results are cached too, so a missing flag is not looked up
        on every request. Lookup errors are not cached.
        """
        cached = self.cache.get(flag_key)
        if cached is not None:
            return cached.flag

        try:
            flag = self.flag_repo.get_by_key(flag_key)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.warning(
                "Feature flag definition lookup failed",
                extra={"flag_key": flag_key, "error": str(e)},
            )
            return None

        definition = flag.to_definition() if flag is not None else None
        self.cache.set(flag_key, definition)
        return definition

    def get_all_flags(self) -> list[FeatureFlag]:
        """Get all feature flags (admin dashboard, uncached)."""
        return self.flag_repo.get_all()

    def get_feature_tier(self, flag_key: str) -> str | None:
        """Subscription tier named in the flag's metadata, if any."""
        flag = self.get_flag(flag_key)
        return flag.tier if flag is not None else None

    def is_module_flag(self, flag_key: str) -> bool:
        """Check if the flag gates a whole module (metadata 'module': true)."""
        flag = self.get_flag(flag_key)
        return flag is not None and flag.is_module

    def update_flag(self, flag_key: str, changes: dict[str, Any]) -> FeatureFlag | None:
        """
        Apply admin edits to a flag and drop cached definitions.

        Args:
            flag_key: Feature flag key
            changes: Field name to new value; 'metadata' maps to flag_metadata

        Returns:
            Updated FeatureFlag, or None if no such flag

        Raises:
            ValidationException: FLAG_UPDATE_INVALID if the database rejects the
                edit (the session is rolled back)
        """
        flag = self.flag_repo.get_by_key(flag_key)
        if flag is None:
            return None

        for field_name, value in changes.items():
            setattr(flag, "flag_metadata" if field_name == "metadata" else field_name, value)

        try:
            flag = self.flag_repo.update(flag)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.warning(
                "Feature flag update rejected",
                extra={"flag_key": flag_key, "error": str(e)},
            )
            raise ValidationException(
                "Invalid feature flag update", code=ErrorCode.FLAG_UPDATE_INVALID
            ) from e

        self.clear_cache()
        logger.info("Feature flag updated", extra={"flag_key": flag_key})
        return flag

    def clear_cache(self) -> None:
        """Clear cached flag definitions (call after flag updates)."""
        self.cache.clear()

    def get_org_tier(self, org_id: str) -> SubscriptionTier:
        """Subscription tier of an organization; FREE when unknown."""
        try:
            org = self.org_repo.get_by_id(org_id)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.warning("Organization tier lookup failed", extra={"org_id": org_id, "error": str(e)})
            return SubscriptionTier.FREE

        if org is None or org.subscription_tier is None:
            return SubscriptionTier.FREE
        return SubscriptionTier(org.subscription_tier)

    @staticmethod
    def tier_has_feature(tier: SubscriptionTier | str, feature: str) -> bool:
        """Check if a tier bundles a feature (no database call)."""
        try:
            return feature in TIER_FEATURES[SubscriptionTier(tier)]
        except ValueError:
            return False

    @staticmethod
    def get_tier_features(tier: SubscriptionTier | str) -> list[str]:
        """All features bundled with a tier; unknown tiers get the free bundle."""
        try:
            return list(TIER_FEATURES[SubscriptionTier(tier)])
        except ValueError:
            return list(TIER_FEATURES[SubscriptionTier.FREE])
