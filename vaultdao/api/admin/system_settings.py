"""
Admin API - System settings
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from vaultdao.infrastructure.database import get_db, transaction
from vaultdao.schemas.system_settings import SystemSettingsResponse, SystemSettingsUpdateIn
from vaultdao.services.system_settings_service import (
    delete_setting,
    get_all_settings,
    update_settings,
)

router = APIRouter()


@router.get("/system-settings", response_model=SystemSettingsResponse, summary="Get system settings")
async def get_system_settings_endpoint(db: Session = Depends(get_db)) -> SystemSettingsResponse:
    return SystemSettingsResponse(settings=get_all_settings(db))


@router.patch(
    "/system-settings",
    response_model=SystemSettingsResponse,
    summary="Update system settings",
    description="Key-wise merge: keys not in the body keep their value.",
)
async def update_system_settings_endpoint(
    request: SystemSettingsUpdateIn,
    db: Session = Depends(get_db),
) -> SystemSettingsResponse:
    with transaction(db):
        stored = update_settings(db, request.settings)
    return SystemSettingsResponse(settings=stored)


@router.delete(
    "/system-settings/{key}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a system setting",
    description="Removes one key; readers fall back to its default.",
)
async def delete_system_setting_endpoint(key: str, db: Session = Depends(get_db)) -> None:
    with transaction(db):
        deleted = delete_setting(db, key)
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={
                "error": {
                    "code": "SETTING_NOT_FOUND",
                    "message": f"System setting '{key}' not found",
                    "details": {"key": key},
                }
            },
        )
