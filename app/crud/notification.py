from sqlalchemy.orm import Session
from typing import List, Optional

from app.crud.base import CRUDBase
from app.models.notification import Notification
from app.schemas.notification import NotificationCreate, NotificationUpdate

class CRUDNotification(CRUDBase[Notification, NotificationCreate, NotificationUpdate]):
    """CRUD operations for Notifications."""

    def get_for_user(self, db: Session, *, user_id: int, skip: int = 0, limit: int = 100) -> List[Notification]:
        return (
            db.query(self.model)
            .filter(self.model.user_id == user_id)
            .order_by(self.model.created_at.desc(), self.model.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def get_unread_count(self, db: Session, *, user_id: int) -> int:
        return db.query(self.model).filter(self.model.user_id == user_id, self.model.is_read == False).count()

    def get_by_user_type_and_subject(
        self, db: Session, *, user_id: int, notification_type: str, subject_key: str, subject_id: int
    ) -> Optional[Notification]:
        # meta is JSON; filter in Python to stay portable across backends
        candidates = (
            db.query(self.model)
            .filter(self.model.user_id == user_id, self.model.notification_type == notification_type)
            .all()
        )
        for candidate in candidates:
            if (candidate.meta or {}).get(subject_key) == subject_id:
                return candidate
        return None

    def mark_as_read(self, db: Session, *, notification_id: int, user_id: int) -> Optional[Notification]:
        notification = (
            db.query(self.model)
            .filter(self.model.id == notification_id, self.model.user_id == user_id)
            .first()
        )
        if notification:
            notification.is_read = True
            db.add(notification)
            db.commit()
            db.refresh(notification)
        return notification

    def mark_all_as_read(self, db: Session, *, user_id: int) -> None:
        db.query(self.model).filter(self.model.user_id == user_id, self.model.is_read == False).update({"is_read": True})
        db.commit()

notification = CRUDNotification(Notification)
