from typing import Optional
from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.constants import ApprovalStatusEnum, ContentTypeEnum, RoleEnum
from app.schemas.content import Content, ContentReview
from app.schemas.response import APIResponse, PaginatedResponse
from app.schemas.user import UserContext
from app.services.content import content_service
from app.utils import deps

router = APIRouter()

require_admin = deps.require_role(RoleEnum.ADMIN)


@router.get("/content", response_model=APIResponse[PaginatedResponse[Content]])
async def get_content_for_approval(
    *,
    db: Session = Depends(deps.get_db),
    context: UserContext = Depends(require_admin),
    approval_status: Optional[ApprovalStatusEnum] = None,
    class_id: Optional[int] = None,
    subject_id: Optional[int] = None,
    chapter_id: Optional[int] = None,
    type: Optional[ContentTypeEnum] = None,
    uploader_id: Optional[int] = None,
    page: int = Query(1, ge=1),
    size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE)
):
    data = content_service.list_review_queue(
        db,
        context,
        page=page,
        size=size,
        approval_status=approval_status,
        class_id=class_id,
        subject_id=subject_id,
        chapter_id=chapter_id,
        type=type,
        uploader_id=uploader_id,
    )
    return APIResponse(message="Content for review retrieved successfully", data=data)


@router.patch("/content/{content_id}/approve", response_model=APIResponse[Content])
async def approve_content(
    *,
    db: Session = Depends(deps.get_transactional_db),
    content_id: int,
    review_in: Optional[ContentReview] = Body(default=None),
    context: UserContext = Depends(require_admin)
):
    feedback = review_in.feedback if review_in else None
    content = content_service.approve_content(db, content_id=content_id, current_user_context=context, feedback=feedback)
    return APIResponse(message="Content approved successfully", data=content)


@router.patch("/content/{content_id}/reject", response_model=APIResponse[Content])
async def reject_content(
    *,
    db: Session = Depends(deps.get_transactional_db),
    content_id: int,
    review_in: Optional[ContentReview] = Body(default=None),
    context: UserContext = Depends(require_admin)
):
    feedback = review_in.feedback if review_in else None
    content = content_service.reject_content(db, content_id=content_id, current_user_context=context, feedback=feedback)
    return APIResponse(message="Content rejected successfully", data=content)
