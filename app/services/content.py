import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.constants import (
    ApprovalStatusEnum,
    ContentTypeEnum,
    QuizTypeEnum,
    RoleEnum,
    QUIZ_OPTION_COUNT,
)
from app.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from app.schemas.response import PaginatedResponse
from app.crud.content import content as crud_content
from app.crud.progress import progress as crud_progress
from app.models.content import Content as ContentModel
from app.schemas.content import (
    ContentCreate,
    ContentUpdate,
    Content as ContentSchema,
    ContentWithProgress,
)
from app.schemas.progress import Progress as ProgressSchema
from app.schemas.user import UserContext
from app.services.notification import notification_service
from app.utils.permission import PermissionHelper as permission_helper

logger = logging.getLogger(__name__)

# Approval state a new row starts in, keyed by the uploader's role
INITIAL_REVIEW_STATE: Dict[RoleEnum, Tuple[ApprovalStatusEnum, bool]] = {
    RoleEnum.ADMIN: (ApprovalStatusEnum.APPROVED, True),
    RoleEnum.TEACHER: (ApprovalStatusEnum.PENDING, False),
}

# Columns a patch may never set directly
PROTECTED_FIELDS = {
    "approval_status", "is_admin_content", "uploader_id", "uploader_role",
    "feedback", "reviewed_by", "reviewed_at", "deleted_at", "deleted_by",
}
NON_NULLABLE_FIELDS = {"title", "class_id", "subject_id", "chapter_id", "type", "tags"}
DRAFT_FIELDS = (
    "type", "s3_key", "duration", "file_size", "quiz_type", "google_form_url", "questions",
)


def initial_review_state(role: RoleEnum) -> Tuple[ApprovalStatusEnum, bool]:
    """(approval_status, is_admin_content) for content created by `role`."""
    try:
        return INITIAL_REVIEW_STATE[role]
    except KeyError:
        raise AuthorizationError("Only teachers and admins can submit content.")


def _question_issues(index: int, question: Any) -> List[Dict[str, str]]:
    if not isinstance(question, dict):
        question = question.model_dump()
    path = f"questions.{index}"
    issues = []
    if not (question.get("question_text") or "").strip():
        issues.append({"field": f"{path}.question_text", "message": "Question text is required"})
    options = question.get("options") or []
    if len(options) != QUIZ_OPTION_COUNT:
        issues.append({"field": f"{path}.options", "message": f"Each question must have exactly {QUIZ_OPTION_COUNT} options"})
    elif any(not (option or "").strip() for option in options):
        issues.append({"field": f"{path}.options", "message": "Option cannot be empty"})
    correct_option = question.get("correct_option")
    if not isinstance(correct_option, int) or isinstance(correct_option, bool) or not 0 <= correct_option < QUIZ_OPTION_COUNT:
        issues.append({
            "field": f"{path}.correct_option",
            "message": f"Correct option must be between 0 and {QUIZ_OPTION_COUNT - 1}",
        })
    return issues


def validate_content_draft(draft: Dict[str, Any]) -> None:
    """Check the fields each content type requires. Raises ValidationError listing every problem."""
    content_type = ContentTypeEnum(draft["type"])
    issues: List[Dict[str, str]] = []

    if content_type != ContentTypeEnum.QUIZ and not draft.get("s3_key"):
        issues.append({"field": "s3_key", "message": "s3_key is required for non-quiz content"})

    if content_type == ContentTypeEnum.VIDEO:
        if draft.get("duration") is None:
            issues.append({"field": "duration", "message": "duration is required for video content"})
        if draft.get("file_size") is None:
            issues.append({"field": "file_size", "message": "file_size is required for video content"})

    if content_type == ContentTypeEnum.QUIZ:
        quiz_type = draft.get("quiz_type")
        if not quiz_type:
            issues.append({"field": "quiz_type", "message": "quiz_type is required for quiz content"})
        elif QuizTypeEnum(quiz_type) == QuizTypeEnum.GOOGLE_FORM:
            if not draft.get("google_form_url"):
                issues.append({"field": "google_form_url", "message": "google_form_url is required for Google Form quizzes"})
        else:
            questions = draft.get("questions") or []
            if not questions:
                issues.append({"field": "questions", "message": "At least one question is required for native quizzes"})
            for index, question in enumerate(questions):
                issues.extend(_question_issues(index, question))

    if issues:
        raise ValidationError(issues[0]["message"], details={"errors": issues})


class ContentService:

    def _get_or_raise(self, db: Session, content_id: int) -> ContentModel:
        content = crud_content.get_for_update(db, id=content_id)
        if not content:
            raise NotFoundError("Content not found")
        return content

    def submit_content(self, db: Session, content_in: ContentCreate, current_user_context: UserContext) -> ContentSchema:
        approval_status, is_admin_content = initial_review_state(current_user_context.role)

        content_data = content_in.model_dump()
        validate_content_draft(content_data)
        content_data.update(
            uploader_id=current_user_context.user.id,
            uploader_role=current_user_context.role,
            approval_status=approval_status,
            is_admin_content=is_admin_content,
        )
        content = crud_content.create(db, obj_in=content_data)
        logger.info(
            f"Content {content.id} submitted by {current_user_context.role.value} "
            f"{current_user_context.user.id} as {approval_status.value}"
        )

        if permission_helper.is_teacher(current_user_context):
            notification_service.notify_content_submission(db, content_id=content.id, content_title=content.title)

        return ContentSchema.model_validate(content)

    def get_content(self, db: Session, content_id: int, current_user_context: Optional[UserContext]) -> ContentSchema:
        content = crud_content.get_visible(db, id=content_id, viewer=current_user_context)
        if not content:
            raise NotFoundError("Content not found")
        return ContentSchema.model_validate(content)

    def update_content(
        self, db: Session, content_id: int, content_in: ContentUpdate, current_user_context: UserContext
    ) -> ContentSchema:
        content = self._get_or_raise(db, content_id)

        if permission_helper.is_teacher(current_user_context):
            if not permission_helper.is_uploader(current_user_context, content):
                raise AuthorizationError("You can only edit your own content")
            if content.approval_status != ApprovalStatusEnum.PENDING:
                raise AuthorizationError(f"Cannot edit {content.approval_status.value} content")
        elif not permission_helper.is_admin(current_user_context):
            raise AuthorizationError("You do not have permission to edit content")

        patch = {k: v for k, v in content_in.model_dump(exclude_unset=True).items() if k not in PROTECTED_FIELDS}
        nulled = sorted(k for k in NON_NULLABLE_FIELDS if k in patch and patch[k] is None)
        if nulled:
            raise ValidationError(f"{nulled[0]} cannot be null", details={"fields": nulled})

        merged = {field: getattr(content, field) for field in DRAFT_FIELDS}
        merged.update({k: v for k, v in patch.items() if k in DRAFT_FIELDS})
        validate_content_draft(merged)

        content = crud_content.update(db, db_obj=content, obj_in=patch)
        logger.info(f"Content {content.id} edited by {current_user_context.role.value} {current_user_context.user.id}")

        if permission_helper.is_teacher(current_user_context):
            notification_service.notify_content_submission(db, content_id=content.id, content_title=content.title)

        return ContentSchema.model_validate(content)

    def delete_content(self, db: Session, content_id: int, current_user_context: UserContext) -> None:
        content = self._get_or_raise(db, content_id)

        if permission_helper.is_teacher(current_user_context):
            if not permission_helper.is_uploader(current_user_context, content):
                raise AuthorizationError("You can only delete your own content")
            if content.approval_status != ApprovalStatusEnum.PENDING:
                raise AuthorizationError("Can only delete pending content")
        elif not permission_helper.is_admin(current_user_context):
            raise AuthorizationError("You do not have permission to delete content")

        crud_content.delete(db, id=content.id, deleted_by=current_user_context.user.id)
        logger.info(f"Content {content_id} deleted by {current_user_context.role.value} {current_user_context.user.id}")

    def _review(
        self,
        db: Session,
        content_id: int,
        decision: ApprovalStatusEnum,
        feedback: Optional[str],
        current_user_context: UserContext,
    ) -> ContentSchema:
        permission_helper.require_admin(current_user_context, "Only admins can review content.")
        content = self._get_or_raise(db, content_id)

        previous = content.approval_status
        content = crud_content.update(
            db,
            db_obj=content,
            obj_in={
                "approval_status": decision,
                "feedback": feedback,
                "reviewed_by": current_user_context.user.id,
                "reviewed_at": datetime.now(timezone.utc),
            },
        )
        logger.info(
            f"Content {content.id} moved {previous.value} -> {decision.value} by admin {current_user_context.user.id}"
        )

        if content.uploader_role == RoleEnum.TEACHER:
            notification_service.notify_content_reviewed(
                db,
                uploader_id=content.uploader_id,
                content_id=content.id,
                content_title=content.title,
                approved=decision == ApprovalStatusEnum.APPROVED,
                feedback=feedback,
            )
        return ContentSchema.model_validate(content)

    def approve_content(
        self, db: Session, content_id: int, current_user_context: UserContext, feedback: Optional[str] = None
    ) -> ContentSchema:
        return self._review(db, content_id, ApprovalStatusEnum.APPROVED, feedback, current_user_context)

    def reject_content(
        self, db: Session, content_id: int, current_user_context: UserContext, feedback: Optional[str] = None
    ) -> ContentSchema:
        return self._review(db, content_id, ApprovalStatusEnum.REJECTED, feedback, current_user_context)

    def list_content(
        self,
        db: Session,
        current_user_context: Optional[UserContext],
        *,
        page: int = 1,
        size: int = settings.DEFAULT_PAGE_SIZE,
        **filters: Any,
    ) -> PaginatedResponse[ContentWithProgress]:
        """Catalog listing. Non-admin callers cannot widen it past approved content via filters."""
        items, total = crud_content.get_multi_visible(
            db, viewer=current_user_context, page=page, size=size, **filters
        )

        progress_by_content = {}
        if current_user_context is not None and permission_helper.is_student(current_user_context):
            records = crud_progress.get_by_student_for_contents(
                db, student_id=current_user_context.user.id, content_ids=[c.id for c in items]
            )
            progress_by_content = {p.content_id: ProgressSchema.model_validate(p) for p in records}

        data = []
        for item in items:
            row = ContentWithProgress.model_validate(item)
            row.progress = progress_by_content.get(item.id)
            data.append(row)
        return PaginatedResponse[ContentWithProgress].build(data, total, page, size)

    def list_uploaded_content(
        self,
        db: Session,
        current_user_context: UserContext,
        *,
        page: int = 1,
        size: int = settings.DEFAULT_PAGE_SIZE,
        uploader_id: Optional[int] = None,
        **filters: Any,
    ) -> PaginatedResponse[ContentSchema]:
        """Teacher dashboard: a teacher's own uploads in every state. Admins may pick any uploader."""
        permission_helper.require_role(current_user_context, RoleEnum.TEACHER, RoleEnum.ADMIN)
        if permission_helper.is_teacher(current_user_context):
            uploader_id = current_user_context.user.id
        items, total = crud_content.get_multi_visible(
            db,
            viewer=current_user_context,
            page=page,
            size=size,
            uploader_id=uploader_id,
            order_by_updated=True,
            **filters,
        )
        data = [ContentSchema.model_validate(item) for item in items]
        return PaginatedResponse[ContentSchema].build(data, total, page, size)

    def list_review_queue(
        self,
        db: Session,
        current_user_context: UserContext,
        *,
        page: int = 1,
        size: int = settings.DEFAULT_PAGE_SIZE,
        **filters: Any,
    ) -> PaginatedResponse[ContentSchema]:
        permission_helper.require_admin(current_user_context)
        items, total = crud_content.get_multi_visible(
            db, viewer=current_user_context, page=page, size=size, **filters
        )
        data = [ContentSchema.model_validate(item) for item in items]
        return PaginatedResponse[ContentSchema].build(data, total, page, size)


content_service = ContentService()
