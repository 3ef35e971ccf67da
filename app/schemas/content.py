from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime

from app.core.constants import ContentTypeEnum, QuizTypeEnum, ApprovalStatusEnum, RoleEnum
from app.schemas.progress import Progress


class QuizQuestion(BaseModel):
    question_text: str
    s3_key: Optional[str] = None
    options: List[str] = Field(default_factory=list)
    correct_option: Optional[int] = None  # index into options


class ContentBase(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    class_id: int
    subject_id: int
    chapter_id: int
    type: ContentTypeEnum
    s3_key: Optional[str] = None
    thumbnail_key: Optional[str] = None
    file_url: Optional[str] = None
    video_url: Optional[str] = None
    duration: Optional[int] = Field(default=None, ge=0)
    file_size: Optional[int] = Field(default=None, ge=0)
    quiz_type: Optional[QuizTypeEnum] = None
    google_form_url: Optional[str] = None
    questions: Optional[List[QuizQuestion]] = None
    tags: List[str] = Field(default_factory=list)


class ContentCreate(ContentBase):
    """Draft submitted by a teacher or admin. Review fields sent by the client are ignored."""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Fractions explained",
                "class_id": 1,
                "subject_id": 2,
                "chapter_id": 3,
                "type": "video",
                "s3_key": "content/videos/3f2a.mp4",
                "duration": 420,
                "file_size": 10485760,
                "tags": ["maths"]
            }
        }
    )


class ContentUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    class_id: Optional[int] = None
    subject_id: Optional[int] = None
    chapter_id: Optional[int] = None
    type: Optional[ContentTypeEnum] = None
    s3_key: Optional[str] = None
    thumbnail_key: Optional[str] = None
    file_url: Optional[str] = None
    video_url: Optional[str] = None
    duration: Optional[int] = Field(default=None, ge=0)
    file_size: Optional[int] = Field(default=None, ge=0)
    quiz_type: Optional[QuizTypeEnum] = None
    google_form_url: Optional[str] = None
    questions: Optional[List[QuizQuestion]] = None
    tags: Optional[List[str]] = None


class ContentReview(BaseModel):
    feedback: Optional[str] = None


class Content(ContentBase):
    id: int
    uploader_id: int
    uploader_role: RoleEnum
    is_admin_content: bool
    approval_status: ApprovalStatusEnum
    feedback: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ContentWithProgress(Content):
    """Content row as listed for a student, with that student's own progress attached."""
    progress: Optional[Progress] = None
