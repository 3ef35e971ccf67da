from sqlalchemy import Column, Integer, Float, String, ForeignKey, DateTime, Enum, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base
from app.core.constants import ProgressStatusEnum


class Progress(Base):
    __tablename__ = "progress"

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    content_id = Column(Integer, ForeignKey("contents.id"), nullable=False, index=True)
    status = Column(Enum(ProgressStatusEnum), nullable=False, default=ProgressStatusEnum.NOT_STARTED)
    time_spent = Column(Float, nullable=False, default=0)  # seconds, only ever incremented
    last_watched_second = Column(Float, nullable=False, default=0)
    progress_percent = Column(Float, nullable=False, default=0)
    quiz_score = Column(Float, nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    # Snapshot taken when the row is created so listings survive content edits
    content_title = Column(String, nullable=True)
    content_type = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    student = relationship("User")
    content = relationship("Content", back_populates="progress_records")
    watch_sessions = relationship(
        "WatchSession", back_populates="progress", cascade="all, delete-orphan", order_by="WatchSession.id"
    )

    __table_args__ = (
        UniqueConstraint("student_id", "content_id", name="uq_progress_student_content"),
    )


class WatchSession(Base):
    """One accepted heartbeat. Rows are append-only."""
    __tablename__ = "watch_sessions"

    id = Column(Integer, primary_key=True, index=True)
    progress_id = Column(Integer, ForeignKey("progress.id", ondelete="CASCADE"), nullable=False, index=True)
    started_at = Column(DateTime(timezone=True), nullable=False)
    duration = Column(Float, nullable=False)

    progress = relationship("Progress", back_populates="watch_sessions")
