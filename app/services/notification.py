import logging
from sqlalchemy.orm import Session
from typing import Any, Dict, List, Optional

from app.core.constants import NotificationTypeEnum, RoleEnum
from app.crud.notification import notification as crud_notification
from app.crud.user import user as crud_user
from app.schemas.notification import NotificationCreate, Notification

logger = logging.getLogger(__name__)


class NotificationService:
    """Best-effort notification sink.

    The emit/notify methods never raise: a failed write is logged and rolled
    back, and the caller's already-committed state transition stands.
    """

    def emit(
        self,
        db: Session,
        *,
        user_id: int,
        role: RoleEnum,
        notification_type: NotificationTypeEnum,
        title: str,
        message: str,
        meta: Optional[Dict[str, Any]] = None,
    ) -> None:
        try:
            notification_in = NotificationCreate(
                user_id=user_id,
                role=role,
                notification_type=notification_type.value,
                title=title,
                message=message,
                meta=meta,
            )
            crud_notification.create(db, obj_in=notification_in)
        except Exception:
            db.rollback()
            logger.exception(f"Failed to emit {notification_type.value} notification to user {user_id}")

    def notify_content_submission(self, db: Session, *, content_id: int, content_title: str) -> None:
        """One notification per admin per content: a resubmission refreshes the existing row."""
        try:
            admins = crud_user.get_by_role(db, role=RoleEnum.ADMIN)
        except Exception:
            db.rollback()
            logger.exception(f"Failed to load admins for content {content_id} submission notice")
            return

        for admin in admins:
            try:
                existing = crud_notification.get_by_user_type_and_subject(
                    db,
                    user_id=admin.id,
                    notification_type=NotificationTypeEnum.CONTENT_PENDING.value,
                    subject_key="content_id",
                    subject_id=content_id,
                )
                if existing:
                    crud_notification.update(
                        db,
                        db_obj=existing,
                        obj_in={
                            "title": "Content Pending Approval",
                            "message": f'Content "{content_title}" is pending approval',
                            "is_read": False,
                        },
                    )
                    continue
            except Exception:
                db.rollback()
                logger.exception(f"Failed to refresh content_pending notification for admin {admin.id}")
                continue

            self.emit(
                db,
                user_id=admin.id,
                role=RoleEnum.ADMIN,
                notification_type=NotificationTypeEnum.CONTENT_PENDING,
                title="Content Pending Approval",
                message=f'Content "{content_title}" is pending approval',
                meta={"content_id": content_id},
            )

    def notify_content_reviewed(
        self, db: Session, *, uploader_id: int, content_id: int, content_title: str, approved: bool, feedback: Optional[str]
    ) -> None:
        verdict = "approved" if approved else "rejected"
        message = f'Your content "{content_title}" was {verdict}'
        if feedback:
            message = f"{message}: {feedback}"
        self.emit(
            db,
            user_id=uploader_id,
            role=RoleEnum.TEACHER,
            notification_type=NotificationTypeEnum.CONTENT_REVIEWED,
            title=f"Content {verdict.capitalize()}",
            message=message,
            meta={"content_id": content_id, "approval_status": verdict},
        )

    def notify_parent_link_request(self, db: Session, *, student_id: int, parent_name: str, link_id: int) -> None:
        self.emit(
            db,
            user_id=student_id,
            role=RoleEnum.STUDENT,
            notification_type=NotificationTypeEnum.PARENT_LINK_REQUEST,
            title="Parent Link Request",
            message=f"{parent_name} wants to link to your account",
            meta={"link_id": link_id},
        )

    def notify_parent_link_response(self, db: Session, *, parent_id: int, student_name: str, link_id: int, approved: bool) -> None:
        verdict = "approved" if approved else "rejected"
        self.emit(
            db,
            user_id=parent_id,
            role=RoleEnum.PARENT,
            notification_type=NotificationTypeEnum.PARENT_LINK_RESPONSE,
            title="Parent Link Response",
            message=f"{student_name} {verdict} your link request",
            meta={"link_id": link_id, "status": verdict},
        )

    def get_user_notifications(self, db: Session, *, user_id: int, skip: int = 0, limit: int = 100) -> List[Notification]:
        result = crud_notification.get_for_user(db, user_id=user_id, skip=skip, limit=limit)
        return [Notification.model_validate(n) for n in result]

    def get_unread_count(self, db: Session, *, user_id: int) -> int:
        return crud_notification.get_unread_count(db, user_id=user_id)

    def mark_notification_as_read(self, db: Session, *, notification_id: int, user_id: int) -> Notification | None:
        n = crud_notification.mark_as_read(db, notification_id=notification_id, user_id=user_id)
        return Notification.model_validate(n) if n else None

    def mark_all_notifications_as_read(self, db: Session, *, user_id: int) -> None:
        crud_notification.mark_all_as_read(db, user_id=user_id)

notification_service = NotificationService()
