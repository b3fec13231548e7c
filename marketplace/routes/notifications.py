from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, ConfigDict, field_validator
from sqlalchemy.orm import Session

from ..auth import get_current_user
from ..database import get_db
from ..models import User
from ..services.push_service import PushService

router = APIRouter(prefix="/notifications", tags=["Notifications"])


class DeviceTokenRequest(BaseModel):
    token: str
    platform: Optional[str] = None  # ios | android | web

    @field_validator("token")
    @classmethod
    def validate_token(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("token is required")
        return v


class NotificationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    type: Optional[str] = None
    title: str
    body: Optional[str] = None
    data: Optional[dict] = None
    is_read: bool
    created_at: Optional[datetime] = None


@router.get("", response_model=list[NotificationResponse])
async def get_notifications(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    unread_only: bool = False,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    notifications = PushService.get_user_notifications(
        db, current_user.id, limit=limit, offset=offset, unread_only=unread_only
    )
    return [NotificationResponse.model_validate(n) for n in notifications]


@router.post("/device-tokens")
async def register_device_token(
    request: DeviceTokenRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    PushService.register_token(db, current_user.id, request.token, request.platform)
    return {"success": True}


@router.delete("/device-tokens")
async def remove_device_token(
    request: DeviceTokenRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if not PushService.remove_token(db, current_user.id, request.token):
        raise HTTPException(status_code=404, detail="Device token not found")
    return {"success": True}
