from fastapi import APIRouter

from app.services.settings_service import maintenance_check

router = APIRouter()


@router.get("/check-maintenance")
def check_maintenance():
    return {"maintenanceMode": maintenance_check.is_maintenance_mode()}
