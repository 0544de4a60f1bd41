from datetime import datetime
from typing import List, Optional

from sqlalchemy import Column, DateTime
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.types import JSON, Text
from sqlmodel import Field, SQLModel

# JSONB on PostgreSQL, plain JSON elsewhere.
JSONDocument = JSON().with_variant(JSONB(), "postgresql")


class TranscriptionRecord(SQLModel, table=True):
    __tablename__ = "transcriptions"

    task_id: str = Field(primary_key=True, max_length=255)
    transcript: str = Field(sa_column=Column(Text, nullable=False))
    audio_url: Optional[str] = Field(default=None, sa_column=Column(Text))
    completed_at: datetime = Field(
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )
    timestamps: List[dict] = Field(sa_column=Column(JSONDocument, nullable=False))
    confidences: List[dict] = Field(sa_column=Column(JSONDocument, nullable=False))
    keywords: List[dict] = Field(sa_column=Column(JSONDocument, nullable=False))
