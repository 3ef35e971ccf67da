from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Enum, JSON, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base
from app.core.constants import ContentTypeEnum, QuizTypeEnum, ApprovalStatusEnum, RoleEnum

class Content(Base):
    __tablename__ = "contents"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, index=True, nullable=False)
    description = Column(String, nullable=True)

    # References into the catalog (classes/subjects/chapters), managed elsewhere
    class_id = Column(Integer, nullable=False, index=True)
    subject_id = Column(Integer, nullable=False, index=True)
    chapter_id = Column(Integer, nullable=False, index=True)

    type = Column(Enum(ContentTypeEnum), nullable=False, index=True)
    s3_key = Column(String, nullable=True)
    thumbnail_key = Column(String, nullable=True)
    file_url = Column(String, nullable=True)
    video_url = Column(String, nullable=True)
    duration = Column(Integer, nullable=True)  # seconds
    file_size = Column(Integer, nullable=True)  # bytes
    quiz_type = Column(Enum(QuizTypeEnum), nullable=True)
    google_form_url = Column(String, nullable=True)
    questions = Column(JSON, nullable=True)
    tags = Column(JSON, nullable=False, default=list)

    uploader_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    uploader_role = Column(Enum(RoleEnum), nullable=False)
    is_admin_content = Column(Boolean, nullable=False, default=False)
    approval_status = Column(Enum(ApprovalStatusEnum), nullable=False, default=ApprovalStatusEnum.PENDING)

    # Review
    feedback = Column(String, nullable=True)
    reviewed_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)

    # Soft delete
    deleted_at = Column(DateTime(timezone=True), nullable=True)
    deleted_by = Column(Integer, ForeignKey("users.id"), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    uploader = relationship("User", foreign_keys=[uploader_id])
    progress_records = relationship("Progress", back_populates="content")

    __table_args__ = (
        Index("ix_contents_approval_status_uploader_role", "approval_status", "uploader_role"),
        Index("ix_contents_catalog", "class_id", "subject_id", "chapter_id"),
    )
