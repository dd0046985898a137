from typing import Optional
from sqlmodel import Field
from .base import TimestampModel


class Notification(TimestampModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    title: str
    message: str
    type: str
    # Free text so that priorities added later still load; ranking falls back for unknowns
    priority: str = Field(default="normal")
    emoji: Optional[str] = None
    read: bool = Field(default=False)
    action_url: Optional[str] = None
    related_item_id: Optional[int] = None
    related_item_type: Optional[str] = None
