from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple
from sqlalchemy import case
from sqlalchemy.orm import Session, Query, contains_eager

from app.crud.base import CRUDBase, paginate_query
from app.crud.content import restrict_to_visible
from app.core.constants import ProgressStatusEnum
from app.models.content import Content
from app.models.progress import Progress, WatchSession


class CRUDProgress(CRUDBase[Progress, dict, dict]):

    def _query_with_visible_content(self, db: Session) -> Query:
        # Progress rows are only served for content a student could open right now
        query = db.query(Progress).join(Progress.content).options(contains_eager(Progress.content))
        return restrict_to_visible(query, viewer=None)

    def get_by_student_and_content(self, db: Session, *, student_id: int, content_id: int) -> Optional[Progress]:
        return (
            db.query(Progress)
            .filter(Progress.student_id == student_id)
            .filter(Progress.content_id == content_id)
            .first()
        )

    def get_visible_by_student_and_content(self, db: Session, *, student_id: int, content_id: int) -> Optional[Progress]:
        return (
            self._query_with_visible_content(db)
            .filter(Progress.student_id == student_id)
            .filter(Progress.content_id == content_id)
            .first()
        )

    def get_by_student_for_contents(self, db: Session, *, student_id: int, content_ids: List[int]) -> List[Progress]:
        if not content_ids:
            return []
        return (
            db.query(Progress)
            .filter(Progress.student_id == student_id)
            .filter(Progress.content_id.in_(content_ids))
            .all()
        )

    def get_multi_for_student(
        self,
        db: Session,
        *,
        student_id: int,
        page: int,
        size: int,
        class_id: Optional[int] = None,
        subject_id: Optional[int] = None,
        status: Optional[ProgressStatusEnum] = None,
    ) -> Tuple[List[Progress], int]:
        query = self._query_with_visible_content(db).filter(Progress.student_id == student_id)
        if class_id is not None:
            query = query.filter(Content.class_id == class_id)
        if subject_id is not None:
            query = query.filter(Content.subject_id == subject_id)
        if status is not None:
            query = query.filter(Progress.status == status)
        query = query.order_by(Progress.updated_at.desc(), Progress.id.desc())
        return paginate_query(query, page=page, size=size)

    def get_recent_for_student(self, db: Session, *, student_id: int, limit: int = 10) -> List[Progress]:
        return (
            self._query_with_visible_content(db)
            .filter(Progress.student_id == student_id)
            .order_by(Progress.updated_at.desc(), Progress.id.desc())
            .limit(limit)
            .all()
        )

    def increment_time(self, db: Session, *, progress_id: int, seconds: float, duration: Optional[int] = None) -> None:
        """Add seconds in a single UPDATE so concurrent heartbeats never lose an increment."""
        values = {
            Progress.time_spent: Progress.time_spent + seconds,
            Progress.last_watched_second: Progress.last_watched_second + seconds,
        }
        if duration:
            # SET expressions see the pre-update row, so recompute from the new total
            watched = (Progress.time_spent + seconds) * 100.0 / duration
            values[Progress.progress_percent] = case(
                (Progress.status == ProgressStatusEnum.COMPLETED, Progress.progress_percent),
                (watched >= 100, 100.0),
                else_=watched,
            )
        db.query(Progress).filter(Progress.id == progress_id).update(
            values,
            synchronize_session=False,
        )

    def add_watch_session(self, db: Session, *, progress_id: int, seconds: float) -> WatchSession:
        """Stage the session a heartbeat closes; the caller commits it with the increment."""
        session = WatchSession(
            progress_id=progress_id,
            started_at=datetime.now(timezone.utc) - timedelta(seconds=seconds),
            duration=seconds,
        )
        db.add(session)
        return session

    def advance_status(
        self, db: Session, *, progress_id: int, from_status: ProgressStatusEnum, to_status: ProgressStatusEnum
    ) -> None:
        """Conditional status move; a row already past from_status is left alone."""
        db.query(Progress).filter(Progress.id == progress_id, Progress.status == from_status).update(
            {Progress.status: to_status},
            synchronize_session=False,
        )


progress = CRUDProgress(Progress)
