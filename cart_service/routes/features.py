"""Feature flag API routes"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Query

from ..core.config import Settings, get_settings
from ..core.flags import FlagRegistry, flag_registry

router = APIRouter(prefix="/api/features", tags=["Features"])


def get_flag_registry() -> FlagRegistry:
    return flag_registry


@router.get("/flags")
async def get_feature_flags(
    flags: FlagRegistry = Depends(get_flag_registry),
    settings: Settings = Depends(get_settings),
):
    """Current bug toggles and feature controls"""
    snapshot = flags.snapshot()
    return {
        "environment": settings.environment,
        "current_time": datetime.now(timezone.utc).isoformat(),
        "bug_flags": snapshot.bug_flags,
        "feature_flags": snapshot.feature_controls,
    }


@router.post("/bugs/{bug_name}/toggle")
async def toggle_bug(
    bug_name: str,
    enable: bool = Query(...),
    flags: FlagRegistry = Depends(get_flag_registry),
    settings: Settings = Depends(get_settings),
):
    """Turn one bug on or off (development only)"""
    if not settings.is_development:
        raise HTTPException(status_code=403, detail="Bug toggles are only available in development")

    try:
        flags.toggle_bug(bug_name, enable)
    except KeyError:
        raise HTTPException(status_code=400, detail=f"Unknown bug: {bug_name}")

    return {"bug": bug_name, "enabled": enable, "message": "Bug flag updated"}
