from datetime import datetime
from typing import Optional

from sqlalchemy import Column
from sqlalchemy.types import Text
from sqlmodel import Field, SQLModel


class CompactionEntity(SQLModel, table=True):
    __tablename__ = "compactions"

    id: str = Field(primary_key=True, max_length=255)
    compaction_text_human: Optional[str] = Field(
        default=None, sa_column=Column(Text, nullable=True)
    )
    voice_id: Optional[str] = Field(default=None, max_length=255)
    video_id: Optional[str] = Field(default=None, max_length=255)

    audio_url: Optional[str] = Field(default=None)
    cartesia_request_id: Optional[str] = Field(default=None, max_length=255)
    compaction_audio_duration: Optional[float] = Field(default=None)
    status: Optional[str] = Field(default=None, max_length=32)
    status_code: Optional[int] = Field(default=None)
    error_message: Optional[str] = Field(
        default=None, sa_column=Column(Text, nullable=True)
    )

    created_at: Optional[datetime] = Field(default=None)
    updated_at: Optional[datetime] = Field(default=None)
