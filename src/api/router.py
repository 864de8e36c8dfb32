from fastapi import APIRouter

from src.api.admin import router as admin_router
from src.api.devices import router as devices_router

api_router = APIRouter()
api_router.include_router(devices_router)
api_router.include_router(admin_router)
