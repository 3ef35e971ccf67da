import logging
import math
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.constants import ProgressStatusEnum, RoleEnum, MIN_QUIZ_SCORE, MAX_QUIZ_SCORE
from app.core.exceptions import NotFoundError, ValidationError
from app.schemas.response import PaginatedResponse
from app.crud.content import content as crud_content
from app.crud.progress import progress as crud_progress
from app.models.content import Content as ContentModel
from app.models.progress import Progress as ProgressModel
from app.schemas.progress import Progress as ProgressSchema, ProgressDetail, ProgressWithContent
from app.schemas.user import UserContext
from app.services.parent_child import parent_child_service
from app.utils.permission import PermissionHelper as permission_helper

logger = logging.getLogger(__name__)


def clamp_ping_seconds(seconds: float) -> float:
    """Bound one heartbeat's contribution to [0, MAX_PING_SECONDS]."""
    if math.isnan(seconds):
        return 0
    return min(max(0, seconds), settings.MAX_PING_SECONDS)


def percent_watched(time_spent: float, duration: Optional[int]) -> float:
    if not duration:
        return 0
    return min(time_spent / duration * 100, 100)


class ProgressService:

    def _get_openable_content(self, db: Session, content_id: int) -> ContentModel:
        # Same rule a student sees when viewing: approved and not deleted
        content = crud_content.get_visible(db, id=content_id, viewer=None)
        if not content:
            raise NotFoundError("Content not found or not approved")
        return content

    def _find_or_create(
        self, db: Session, *, student_id: int, content: ContentModel, initial: Dict[str, Any]
    ) -> Tuple[ProgressModel, bool]:
        """Return (row, created). A concurrent insert for the same pair is absorbed by re-reading."""
        progress = crud_progress.get_by_student_and_content(db, student_id=student_id, content_id=content.id)
        if progress:
            return progress, False

        try:
            progress = crud_progress.create(
                db,
                obj_in={
                    "student_id": student_id,
                    "content_id": content.id,
                    "content_title": content.title,
                    "content_type": content.type.value,
                    **initial,
                },
            )
            return progress, True
        except IntegrityError:
            db.rollback()
            logger.info(f"Progress for student {student_id} content {content.id} created concurrently; reusing it")
            progress = crud_progress.get_by_student_and_content(db, student_id=student_id, content_id=content.id)
            return progress, False

    def open_content(self, db: Session, content_id: int, current_user_context: UserContext) -> ProgressSchema:
        permission_helper.require_student(current_user_context, "Only students can open content.")
        content = self._get_openable_content(db, content_id)
        student_id = current_user_context.user.id

        progress, created = self._find_or_create(
            db,
            student_id=student_id,
            content=content,
            initial={"status": ProgressStatusEnum.IN_PROGRESS},
        )
        if not created and progress.status == ProgressStatusEnum.NOT_STARTED:
            crud_progress.advance_status(
                db,
                progress_id=progress.id,
                from_status=ProgressStatusEnum.NOT_STARTED,
                to_status=ProgressStatusEnum.IN_PROGRESS,
            )
            db.commit()
            db.refresh(progress)

        if created:
            logger.info(f"Student {student_id} opened content {content_id} for the first time")
        return ProgressSchema.model_validate(progress)

    def record_video_time(
        self, db: Session, content_id: int, seconds_since_last_ping: float, current_user_context: UserContext
    ) -> ProgressSchema:
        """Heartbeat accrual. Safe to repeat or replay: each call only adds a bounded amount."""
        permission_helper.require_student(current_user_context, "Only students can record watch time.")
        content = self._get_openable_content(db, content_id)
        student_id = current_user_context.user.id
        seconds = clamp_ping_seconds(seconds_since_last_ping)

        progress, created = self._find_or_create(
            db,
            student_id=student_id,
            content=content,
            initial={
                "status": ProgressStatusEnum.IN_PROGRESS,
                "time_spent": seconds,
                "last_watched_second": seconds,
                "progress_percent": percent_watched(seconds, content.duration),
            },
        )
        if not created:
            crud_progress.increment_time(db, progress_id=progress.id, seconds=seconds, duration=content.duration)
            crud_progress.advance_status(
                db,
                progress_id=progress.id,
                from_status=ProgressStatusEnum.NOT_STARTED,
                to_status=ProgressStatusEnum.IN_PROGRESS,
            )
        if seconds > 0:
            crud_progress.add_watch_session(db, progress_id=progress.id, seconds=seconds)
        db.commit()
        db.refresh(progress)

        if seconds != seconds_since_last_ping:
            logger.warning(
                f"Clamped ping from student {student_id} on content {content_id}: "
                f"{seconds_since_last_ping} -> {seconds}"
            )
        return ProgressSchema.model_validate(progress)

    def complete_content(
        self, db: Session, content_id: int, current_user_context: UserContext, quiz_score: Optional[float] = None
    ) -> ProgressSchema:
        permission_helper.require_student(current_user_context, "Only students can complete content.")
        progress = crud_progress.get_visible_by_student_and_content(
            db, student_id=current_user_context.user.id, content_id=content_id
        )
        if not progress:
            raise NotFoundError("Progress not found. Please open the content first.")

        if quiz_score is not None and not MIN_QUIZ_SCORE <= quiz_score <= MAX_QUIZ_SCORE:
            raise ValidationError(f"Quiz score must be between {MIN_QUIZ_SCORE} and {MAX_QUIZ_SCORE}")

        update_data: Dict[str, Any] = {
            "status": ProgressStatusEnum.COMPLETED,
            "completed_at": datetime.now(timezone.utc),
            "progress_percent": 100,
        }
        if quiz_score is not None:
            update_data["quiz_score"] = quiz_score
        progress = crud_progress.update(db, db_obj=progress, obj_in=update_data)
        logger.info(f"Student {current_user_context.user.id} completed content {content_id}")
        return ProgressSchema.model_validate(progress)

    def _list_for_student(
        self,
        db: Session,
        student_id: int,
        *,
        page: int,
        size: int,
        class_id: Optional[int],
        subject_id: Optional[int],
        status: Optional[ProgressStatusEnum],
    ) -> PaginatedResponse[ProgressWithContent]:
        items, total = crud_progress.get_multi_for_student(
            db,
            student_id=student_id,
            page=page,
            size=size,
            class_id=class_id,
            subject_id=subject_id,
            status=status,
        )
        data = [ProgressWithContent.model_validate(item) for item in items]
        return PaginatedResponse[ProgressWithContent].build(data, total, page, size)

    def get_my_progress(
        self,
        db: Session,
        current_user_context: UserContext,
        *,
        page: int = 1,
        size: int = settings.DEFAULT_PAGE_SIZE,
        class_id: Optional[int] = None,
        subject_id: Optional[int] = None,
        status: Optional[ProgressStatusEnum] = None,
    ) -> PaginatedResponse[ProgressWithContent]:
        permission_helper.require_student(current_user_context)
        return self._list_for_student(
            db, current_user_context.user.id,
            page=page, size=size, class_id=class_id, subject_id=subject_id, status=status,
        )

    def get_child_progress(
        self,
        db: Session,
        student_id: int,
        current_user_context: UserContext,
        *,
        page: int = 1,
        size: int = settings.DEFAULT_PAGE_SIZE,
        class_id: Optional[int] = None,
        subject_id: Optional[int] = None,
        status: Optional[ProgressStatusEnum] = None,
    ) -> PaginatedResponse[ProgressWithContent]:
        parent_child_service.ensure_can_view_student(db, student_id=student_id, current_user_context=current_user_context)
        return self._list_for_student(
            db, student_id,
            page=page, size=size, class_id=class_id, subject_id=subject_id, status=status,
        )

    def get_content_progress(self, db: Session, content_id: int, current_user_context: UserContext) -> ProgressDetail:
        permission_helper.require_student(current_user_context)
        progress = crud_progress.get_visible_by_student_and_content(
            db, student_id=current_user_context.user.id, content_id=content_id
        )
        if not progress:
            raise NotFoundError("Progress not found")
        return ProgressDetail.model_validate(progress)

    def get_recently_visited(self, db: Session, current_user_context: UserContext, limit: int = 10) -> List[ProgressWithContent]:
        permission_helper.require_student(current_user_context)
        records = crud_progress.get_recent_for_student(db, student_id=current_user_context.user.id, limit=limit)
        return [ProgressWithContent.model_validate(p) for p in records]

    def delete_progress(self, db: Session, progress_id: int, current_user_context: UserContext) -> None:
        """Remediation: drop a progress row outright so the student starts over."""
        permission_helper.require_role(
            current_user_context, RoleEnum.ADMIN, RoleEnum.TEACHER,
            error_message="Only admins and teachers can delete progress records.",
        )
        progress = crud_progress.get(db, id=progress_id)
        if not progress:
            raise NotFoundError("Progress record not found")
        student_id, content_id = progress.student_id, progress.content_id

        crud_progress.delete(db, id=progress_id)
        logger.info(
            f"Progress {progress_id} (student {student_id}, content {content_id}) "
            f"deleted by {current_user_context.role.value} {current_user_context.user.id}"
        )


progress_service = ProgressService()
