from datetime import datetime
from sqlmodel import SQLModel, Field


class TimestampModel(SQLModel):
    created_at: datetime = Field(default_factory=datetime.utcnow, nullable=False)
