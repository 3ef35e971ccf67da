import logging
from datetime import datetime, timezone
from typing import List
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.constants import LinkStatusEnum, RoleEnum
from app.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from app.crud.parent_child_link import parent_child_link as crud_link
from app.crud.user import user as crud_user
from app.models.parent_child_link import ParentChildLink as LinkModel
from app.models.user import User as UserModel
from app.schemas.parent_child_link import (
    ParentChildLink as LinkSchema,
    ParentChildLinkRequest,
    ParentChildLinkResult,
    ParentChildLinkWithParent,
    ParentChildLinkWithStudent,
)
from app.schemas.user import StudentSummary, UserContext
from app.services.notification import notification_service
from app.utils.permission import PermissionHelper as permission_helper

logger = logging.getLogger(__name__)


class ParentChildService:

    def _resolve_student(self, db: Session, link_in: ParentChildLinkRequest) -> UserModel:
        if (link_in.child_id is None) == (link_in.student_code is None):
            raise ValidationError("Exactly one of childId or studentCode is required")

        if link_in.child_id is not None:
            student = crud_user.get_student(db, id=link_in.child_id)
        else:
            student = crud_user.get_student_by_code(db, student_code=link_in.student_code.strip().upper())

        if not student:
            raise NotFoundError("Student not found")
        return student

    def _reopen_existing(self, db: Session, link: LinkModel) -> LinkModel:
        """An existing row for the pair: refuse if live, re-arm it if it was rejected."""
        if link.status == LinkStatusEnum.APPROVED:
            raise ValidationError("Link already exists and is approved")
        if link.status == LinkStatusEnum.PENDING:
            raise ValidationError("Link request is already pending")

        return crud_link.update(
            db,
            db_obj=link,
            obj_in={
                "status": LinkStatusEnum.PENDING,
                "requested_at": datetime.now(timezone.utc),
                "responded_at": None,
            },
        )

    def request_link(
        self, db: Session, link_in: ParentChildLinkRequest, current_user_context: UserContext
    ) -> ParentChildLinkResult:
        permission_helper.require_role(current_user_context, RoleEnum.PARENT, error_message="Only parents can request links.")
        student = self._resolve_student(db, link_in)
        parent_id = current_user_context.user.id

        created = False
        existing = crud_link.get_by_pair(db, parent_id=parent_id, student_id=student.id)
        if existing:
            link = self._reopen_existing(db, existing)
        else:
            try:
                link = crud_link.create(
                    db,
                    obj_in={
                        "parent_id": parent_id,
                        "student_id": student.id,
                        "student_code": student.student_code,
                        "status": LinkStatusEnum.PENDING,
                        "requested_at": datetime.now(timezone.utc),
                    },
                )
                created = True
            except IntegrityError:
                # The unique (parent, student) constraint is the source of truth
                db.rollback()
                existing = crud_link.get_by_pair(db, parent_id=parent_id, student_id=student.id)
                link = self._reopen_existing(db, existing)

        logger.info(
            f"Parent {parent_id} {'requested' if created else 're-requested'} link {link.id} to student {student.id}"
        )
        notification_service.notify_parent_link_request(
            db,
            student_id=student.id,
            parent_name=current_user_context.user.full_name or "A parent",
            link_id=link.id,
        )
        return ParentChildLinkResult(
            link=LinkSchema.model_validate(link),
            student=StudentSummary.model_validate(student),
            created=created,
        )

    def _respond(self, db: Session, link_id: int, decision: LinkStatusEnum, current_user_context: UserContext) -> LinkSchema:
        permission_helper.require_student(current_user_context, "Only the linked student can respond to a link request.")
        link = crud_link.get_for_student(db, id=link_id, student_id=current_user_context.user.id)
        if not link:
            raise NotFoundError("Link request not found")
        if link.status != LinkStatusEnum.PENDING:
            raise ValidationError(f"Link request is already {link.status.value}")

        link = crud_link.update(
            db,
            db_obj=link,
            obj_in={"status": decision, "responded_at": datetime.now(timezone.utc)},
        )
        logger.info(f"Student {current_user_context.user.id} {decision.value} link {link.id} from parent {link.parent_id}")

        notification_service.notify_parent_link_response(
            db,
            parent_id=link.parent_id,
            student_name=current_user_context.user.full_name or "Your child",
            link_id=link.id,
            approved=decision == LinkStatusEnum.APPROVED,
        )
        return LinkSchema.model_validate(link)

    def approve_link(self, db: Session, link_id: int, current_user_context: UserContext) -> LinkSchema:
        return self._respond(db, link_id, LinkStatusEnum.APPROVED, current_user_context)

    def reject_link(self, db: Session, link_id: int, current_user_context: UserContext) -> LinkSchema:
        return self._respond(db, link_id, LinkStatusEnum.REJECTED, current_user_context)

    def delete_link(self, db: Session, link_id: int, current_user_context: UserContext) -> None:
        """Hard delete by the student; any read grant ends immediately."""
        permission_helper.require_student(current_user_context, "Only the linked student can remove a link.")
        link = crud_link.get_for_student(db, id=link_id, student_id=current_user_context.user.id)
        if not link:
            raise NotFoundError("Link not found")
        parent_id = link.parent_id
        crud_link.delete(db, id=link.id)
        logger.info(f"Student {current_user_context.user.id} removed link {link_id} with parent {parent_id}")

    def get_pending_links(self, db: Session, current_user_context: UserContext) -> List[ParentChildLinkWithParent]:
        permission_helper.require_student(current_user_context)
        links = crud_link.get_pending_for_student(db, student_id=current_user_context.user.id)
        return [ParentChildLinkWithParent.model_validate(link) for link in links]

    def get_parent_links(self, db: Session, current_user_context: UserContext) -> List[ParentChildLinkWithStudent]:
        permission_helper.require_role(current_user_context, RoleEnum.PARENT)
        links = crud_link.get_approved_for_parent(db, parent_id=current_user_context.user.id)
        return [ParentChildLinkWithStudent.model_validate(link) for link in links]

    def ensure_can_view_student(self, db: Session, *, student_id: int, current_user_context: UserContext) -> None:
        """Gate for every parent read of a student's data. Looked up fresh on each call."""
        if not permission_helper.is_parent(current_user_context):
            raise AuthorizationError("Only a linked parent can view a student's progress")
        link = crud_link.get_approved_by_pair(db, parent_id=current_user_context.user.id, student_id=student_id)
        if not link:
            raise AuthorizationError("You do not have permission to view this child's progress")


parent_child_service = ParentChildService()
