from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Optional, Any, Dict

from app.core.constants import RoleEnum

class NotificationBase(BaseModel):
    """Base schema for a notification."""
    notification_type: str
    title: str
    message: str
    meta: Optional[Dict[str, Any]] = None

class NotificationCreate(NotificationBase):
    """Schema for creating a notification."""
    user_id: int
    role: RoleEnum

class NotificationUpdate(BaseModel):
    """Schema for updating a notification (e.g., marking as read)."""
    is_read: bool

class Notification(NotificationBase):
    """Schema for reading a notification, includes ID and status."""
    id: int
    user_id: int
    is_read: bool
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
