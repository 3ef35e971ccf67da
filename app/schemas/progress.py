from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from typing import List, Optional
from datetime import datetime

from app.core.constants import ProgressStatusEnum, ContentTypeEnum


class ProgressOpen(BaseModel):
    content_id: int = Field(validation_alias=AliasChoices("content_id", "contentId"))


class ProgressPing(BaseModel):
    """Heartbeat from the video player. Out-of-range values are clamped, not rejected."""
    content_id: int = Field(validation_alias=AliasChoices("content_id", "contentId"))
    seconds_since_last_ping: float = Field(
        validation_alias=AliasChoices("seconds_since_last_ping", "secondsSinceLastPing")
    )


class ProgressComplete(BaseModel):
    content_id: int = Field(validation_alias=AliasChoices("content_id", "contentId"))
    quiz_score: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("quiz_score", "quizScore")
    )


class Progress(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    student_id: int
    content_id: int
    status: ProgressStatusEnum
    time_spent: float
    last_watched_second: float
    progress_percent: float
    quiz_score: Optional[float] = None
    completed_at: Optional[datetime] = None
    content_title: Optional[str] = None
    content_type: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ContentSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    type: ContentTypeEnum
    class_id: int
    subject_id: int
    chapter_id: int
    thumbnail_key: Optional[str] = None
    s3_key: Optional[str] = None
    duration: Optional[int] = None


class ProgressWithContent(Progress):
    content: Optional[ContentSummary] = None


class WatchSession(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    started_at: datetime
    duration: float


class ProgressDetail(ProgressWithContent):
    watch_sessions: List[WatchSession] = []
