from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.constants import ApprovalStatusEnum, ContentTypeEnum, RoleEnum
from app.schemas.content import Content, ContentCreate, ContentUpdate, ContentWithProgress
from app.schemas.response import APIResponse, PaginatedResponse
from app.schemas.user import UserContext
from app.services.content import content_service
from app.utils import deps

router = APIRouter()


@router.post("/content", response_model=APIResponse[Content], status_code=status.HTTP_201_CREATED)
async def create_content(
    *,
    db: Session = Depends(deps.get_transactional_db),
    content_in: ContentCreate,
    context: UserContext = Depends(deps.require_role(RoleEnum.TEACHER, RoleEnum.ADMIN))
):
    content = content_service.submit_content(db, content_in=content_in, current_user_context=context)
    return APIResponse(message="Content created successfully", data=content)


@router.get("/content", response_model=APIResponse[PaginatedResponse[ContentWithProgress]])
async def list_content(
    *,
    db: Session = Depends(deps.get_db),
    context: Optional[UserContext] = Depends(deps.get_optional_user_context),
    class_id: Optional[int] = None,
    subject_id: Optional[int] = None,
    chapter_id: Optional[int] = None,
    type: Optional[ContentTypeEnum] = None,
    approval_status: Optional[ApprovalStatusEnum] = None,
    is_admin_content: Optional[bool] = None,
    uploader_id: Optional[int] = None,
    page: int = Query(1, ge=1),
    size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE)
):
    data = content_service.list_content(
        db,
        context,
        page=page,
        size=size,
        class_id=class_id,
        subject_id=subject_id,
        chapter_id=chapter_id,
        type=type,
        approval_status=approval_status,
        is_admin_content=is_admin_content,
        uploader_id=uploader_id,
    )
    return APIResponse(message="Content retrieved successfully", data=data)


@router.get("/teacher/content", response_model=APIResponse[PaginatedResponse[Content]])
async def list_uploaded_content(
    *,
    db: Session = Depends(deps.get_db),
    context: UserContext = Depends(deps.require_role(RoleEnum.TEACHER, RoleEnum.ADMIN)),
    class_id: Optional[int] = None,
    subject_id: Optional[int] = None,
    chapter_id: Optional[int] = None,
    type: Optional[ContentTypeEnum] = None,
    approval_status: Optional[ApprovalStatusEnum] = None,
    uploader_id: Optional[int] = None,
    page: int = Query(1, ge=1),
    size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE)
):
    data = content_service.list_uploaded_content(
        db,
        context,
        page=page,
        size=size,
        uploader_id=uploader_id,
        class_id=class_id,
        subject_id=subject_id,
        chapter_id=chapter_id,
        type=type,
        approval_status=approval_status,
    )
    return APIResponse(message="Uploaded content retrieved successfully", data=data)


@router.get("/content/{content_id}", response_model=APIResponse[Content])
async def get_content(
    *,
    db: Session = Depends(deps.get_db),
    content_id: int,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    content = content_service.get_content(db, content_id=content_id, current_user_context=context)
    return APIResponse(message="Content retrieved successfully", data=content)


@router.patch("/content/{content_id}", response_model=APIResponse[Content])
async def update_content(
    *,
    db: Session = Depends(deps.get_transactional_db),
    content_id: int,
    content_in: ContentUpdate,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    content = content_service.update_content(db, content_id=content_id, content_in=content_in, current_user_context=context)
    return APIResponse(message="Content updated successfully", data=content)


@router.delete("/content/{content_id}", response_model=APIResponse[None])
async def delete_content(
    *,
    db: Session = Depends(deps.get_transactional_db),
    content_id: int,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    content_service.delete_content(db, content_id=content_id, current_user_context=context)
    return APIResponse(message="Content deleted successfully")
