from fastapi import APIRouter, Depends, HTTPException, Query
from typing import List

from app.api.deps import get_admin_user
from app.models.schemas import SettingUpdate
from app.services.settings_service import settings_service, maintenance_check

router = APIRouter()


@router.get("/")
def get_settings(keys: List[str] = Query(...)):
    return settings_service.get_settings(keys)


@router.get("/category/{category}")
def settings_by_category(category: str):
    return settings_service.get_settings_by_category(category)


@router.put("/{key}")
def update_setting(key: str, payload: SettingUpdate, admin=Depends(get_admin_user)):
    setting = settings_service.update_setting(key, payload.value, updated_by=admin["id"])
    if not setting:
        raise HTTPException(status_code=404, detail="Unknown setting")
    return setting


@router.post("/cache/clear")
def clear_cache(admin=Depends(get_admin_user)):
    settings_service.clear_cache()
    maintenance_check.clear_cache()
    return {"cleared": True}
