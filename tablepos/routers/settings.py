# tablepos/routers/settings.py
from fastapi import APIRouter, Depends

from tablepos.deps import get_runtime
from tablepos.schemas.settings import AppSettings, BusinessProfile
from tablepos.services.runtime import PosRuntime

router = APIRouter(prefix="/settings", tags=["settings"])

@router.get("/app", response_model=AppSettings)
def get_app_settings(rt: PosRuntime = Depends(get_runtime)):
    # an unseeded store has nothing yet; hand back the defaults
    return rt.settings or AppSettings()

@router.put("/app", response_model=AppSettings)
def put_app_settings(body: AppSettings, rt: PosRuntime = Depends(get_runtime)):
    return rt.update_settings(body)

@router.get("/profile", response_model=BusinessProfile)
def get_profile(rt: PosRuntime = Depends(get_runtime)):
    return rt.profile or BusinessProfile()

@router.put("/profile", response_model=BusinessProfile)
def put_profile(body: BusinessProfile, rt: PosRuntime = Depends(get_runtime)):
    return rt.update_profile(body)
