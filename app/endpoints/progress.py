from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.constants import ProgressStatusEnum, RoleEnum
from app.schemas.progress import Progress, ProgressComplete, ProgressDetail, ProgressOpen, ProgressPing, ProgressWithContent
from app.schemas.response import APIResponse, PaginatedResponse
from app.schemas.user import UserContext
from app.services.progress import progress_service
from app.utils import deps

router = APIRouter()

require_student = deps.require_role(RoleEnum.STUDENT)


@router.post("/open", response_model=APIResponse[Progress])
async def open_content(
    *,
    db: Session = Depends(deps.get_transactional_db),
    open_in: ProgressOpen,
    context: UserContext = Depends(require_student)
):
    progress = progress_service.open_content(db, content_id=open_in.content_id, current_user_context=context)
    return APIResponse(message="Content opened successfully", data=progress)


@router.post("/video/ping", response_model=APIResponse[Progress])
async def record_video_time(
    *,
    db: Session = Depends(deps.get_transactional_db),
    ping_in: ProgressPing,
    context: UserContext = Depends(require_student)
):
    progress = progress_service.record_video_time(
        db,
        content_id=ping_in.content_id,
        seconds_since_last_ping=ping_in.seconds_since_last_ping,
        current_user_context=context,
    )
    return APIResponse(message="Watch time recorded", data=progress)


@router.post("/complete", response_model=APIResponse[Progress])
async def complete_content(
    *,
    db: Session = Depends(deps.get_transactional_db),
    complete_in: ProgressComplete,
    context: UserContext = Depends(require_student)
):
    progress = progress_service.complete_content(
        db, content_id=complete_in.content_id, current_user_context=context, quiz_score=complete_in.quiz_score
    )
    return APIResponse(message="Content completed successfully", data=progress)


@router.get("/mine", response_model=APIResponse[PaginatedResponse[ProgressWithContent]])
async def get_my_progress(
    *,
    db: Session = Depends(deps.get_db),
    context: UserContext = Depends(require_student),
    class_id: Optional[int] = None,
    subject_id: Optional[int] = None,
    status: Optional[ProgressStatusEnum] = None,
    page: int = Query(1, ge=1),
    size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE)
):
    data = progress_service.get_my_progress(
        db, context, page=page, size=size, class_id=class_id, subject_id=subject_id, status=status
    )
    return APIResponse(message="Progress retrieved successfully", data=data)


@router.get("/recent", response_model=APIResponse[List[ProgressWithContent]])
async def get_recently_visited(
    *,
    db: Session = Depends(deps.get_db),
    context: UserContext = Depends(require_student),
    limit: int = Query(10, ge=1, le=settings.MAX_PAGE_SIZE)
):
    data = progress_service.get_recently_visited(db, context, limit=limit)
    return APIResponse(message="Recently visited content retrieved successfully", data=data)


@router.get("/content/{content_id}", response_model=APIResponse[ProgressDetail])
async def get_content_progress(
    *,
    db: Session = Depends(deps.get_db),
    content_id: int,
    context: UserContext = Depends(require_student)
):
    data = progress_service.get_content_progress(db, content_id=content_id, current_user_context=context)
    return APIResponse(message="Progress retrieved successfully", data=data)


@router.get("/child/{student_id}", response_model=APIResponse[PaginatedResponse[ProgressWithContent]])
async def get_child_progress(
    *,
    db: Session = Depends(deps.get_db),
    student_id: int,
    context: UserContext = Depends(deps.require_role(RoleEnum.PARENT)),
    class_id: Optional[int] = None,
    subject_id: Optional[int] = None,
    status: Optional[ProgressStatusEnum] = None,
    page: int = Query(1, ge=1),
    size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE)
):
    data = progress_service.get_child_progress(
        db, student_id, context, page=page, size=size, class_id=class_id, subject_id=subject_id, status=status
    )
    return APIResponse(message="Child progress retrieved successfully", data=data)


@router.delete("/{progress_id}", response_model=APIResponse[None])
async def delete_progress(
    *,
    db: Session = Depends(deps.get_transactional_db),
    progress_id: int,
    context: UserContext = Depends(deps.require_role(RoleEnum.ADMIN, RoleEnum.TEACHER))
):
    progress_service.delete_progress(db, progress_id=progress_id, current_user_context=context)
    return APIResponse(message="Progress record deleted successfully")
