from datetime import datetime
from typing import List, Optional
from sqlmodel import SQLModel

from ..services.priority import SoundCue


class NotificationRead(SQLModel):
    id: int
    user_id: int
    title: str
    message: str
    type: str
    priority: str
    emoji: Optional[str] = None
    read: bool = False
    action_url: Optional[str] = None
    related_item_id: Optional[int] = None
    related_item_type: Optional[str] = None
    created_at: datetime


class UnreadCount(SQLModel):
    count: int


class MarkReadRequest(SQLModel):
    ids: List[int]


class NotificationSummary(SQLModel):
    unread_count: int
    has_urgent_unread: bool
    has_high_unread: bool
    emphasis: str
    sound: SoundCue


class SoundPreference(SQLModel):
    enabled: bool
