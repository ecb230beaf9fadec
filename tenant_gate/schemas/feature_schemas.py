from pydantic import BaseModel, Field, field_validator
from typing import Any


class FeatureStatusResponse(BaseModel):
    """Whether a feature is on for the current organization and user"""

    key: str
    enabled: bool
    tier: str | None = None
    module: bool = False


class FeatureFlagResponse(BaseModel):
    """Feature flag definition (admin)"""

    key: str
    name: str
    description: str | None
    enabled: bool
    rollout_percentage: int
    org_ids: list[str]
    user_ids: list[str]
    metadata: dict[str, Any] = Field(validation_alias="flag_metadata")

    model_config = {"from_attributes": True, "populate_by_name": True}


class FeatureFlagUpdate(BaseModel):
    """Edit a feature flag; omitted fields are left unchanged"""

    enabled: bool | None = None
    rollout_percentage: int | None = Field(default=None, ge=0, le=100)
    org_ids: list[str] | None = None
    user_ids: list[str] | None = None
    metadata: dict[str, Any] | None = None

    @field_validator("enabled", "rollout_percentage", "org_ids", "user_ids", "metadata")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("may be omitted but not null")
        return value


class CacheClearResponse(BaseModel):
    message: str
