from fastapi import APIRouter, Depends

from tenant_gate.core.exceptions import ErrorCode, NotFoundException
from tenant_gate.core.pipeline import AuthorizationResult
from tenant_gate.dependencies import authorize, get_feature_service
from tenant_gate.schemas.feature_schemas import (
    CacheClearResponse,
    FeatureFlagResponse,
    FeatureFlagUpdate,
)
from tenant_gate.services.feature_service import FeatureService

router = APIRouter()


@router.get("/feature-flags", response_model=list[FeatureFlagResponse])
async def list_feature_flags(
    auth: AuthorizationResult = Depends(authorize(super_admin=True)),
    features: FeatureService = Depends(get_feature_service),
):
    """List all feature flags. **Super admin only.**"""
    return [FeatureFlagResponse.model_validate(flag) for flag in features.get_all_flags()]


@router.patch("/feature-flags/{flag_key}", response_model=FeatureFlagResponse)
async def update_feature_flag(
    flag_key: str,
    flag_update: FeatureFlagUpdate,
    auth: AuthorizationResult = Depends(authorize(super_admin=True)),
    features: FeatureService = Depends(get_feature_service),
):
    """
    Edit a feature flag. **Super admin only.**

    Cached flag definitions are cleared after the edit.
    """
    flag = features.update_flag(flag_key, flag_update.model_dump(exclude_unset=True))
    if flag is None:
        raise NotFoundException("Feature flag not found", code=ErrorCode.FLAG_NOT_FOUND)
    return FeatureFlagResponse.model_validate(flag)


@router.post("/feature-flags/cache/clear", response_model=CacheClearResponse)
async def clear_feature_flag_cache(
    auth: AuthorizationResult = Depends(authorize(super_admin=True)),
    features: FeatureService = Depends(get_feature_service),
):
    """Drop cached flag definitions. **Super admin only.**"""
    features.clear_cache()
    return {"message": "Feature flag cache cleared"}
