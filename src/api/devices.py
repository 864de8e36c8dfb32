from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.database import get_db
from src.models.device import Device
from src.notifications.fcm import FcmSender

router = APIRouter(tags=["devices"])


class RegisterRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    device_id: Optional[str] = Field(None, alias="deviceId")


class UpdateTokenRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    device_id: Optional[str] = Field(None, alias="deviceId")
    fcm_token: Optional[str] = Field(None, alias="fcmToken")


async def _find_device(db: AsyncSession, device_id: str, error_detail: str) -> Optional[Device]:
    try:
        result = await db.execute(select(Device).where(Device.device_id == device_id))
        return result.scalar_one_or_none()
    except SQLAlchemyError as e:
        logger.error(f"Error looking up device {device_id}: {e}")
        raise HTTPException(status_code=500, detail=error_detail)


@router.post("/register")
async def register_device(body: RegisterRequest, db: AsyncSession = Depends(get_db)):
    logger.info(f"Register request received for device {body.device_id}")
    if not body.device_id:
        raise HTTPException(status_code=400, detail="deviceId is required")

    device = await _find_device(db, body.device_id, "Internal server error")
    if device and device.fcm_token:
        return {"fcmToken": device.fcm_token}

    if not FcmSender.is_configured():
        raise HTTPException(status_code=503, detail="Push service not configured")

    try:
        token = FcmSender().create_device_token(body.device_id)
        if device is None:
            device = Device(device_id=body.device_id, fcm_token=token)
            db.add(device)
        else:
            device.fcm_token = token
        await db.commit()
    except Exception as e:
        logger.error(f"Error registering device {body.device_id}: {e}")
        await db.rollback()
        raise HTTPException(status_code=500, detail="Internal server error")

    return {"fcmToken": token}


@router.post("/update-fcm-token")
async def update_fcm_token(body: UpdateTokenRequest, db: AsyncSession = Depends(get_db)):
    logger.info(f"Update FCM token request received for device {body.device_id}")
    if not body.device_id or not body.fcm_token:
        raise HTTPException(status_code=400, detail="deviceId and fcmToken are required")

    device = await _find_device(db, body.device_id, "Internal error updating token")
    if not device:
        raise HTTPException(status_code=404, detail="Device not registered")

    try:
        device.fcm_token = body.fcm_token
        await db.commit()
    except SQLAlchemyError as e:
        logger.error(f"Error updating token for device {body.device_id}: {e}")
        await db.rollback()
        raise HTTPException(status_code=500, detail="Internal error updating token")

    return {"message": "Token updated successfully"}
