from typing import List
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from app.core.constants import RoleEnum
from app.schemas.parent_child_link import (
    ParentChildLink,
    ParentChildLinkRequest,
    ParentChildLinkResult,
    ParentChildLinkWithParent,
    ParentChildLinkWithStudent,
)
from app.schemas.response import APIResponse
from app.schemas.user import UserContext
from app.services.parent_child import parent_child_service
from app.utils import deps

router = APIRouter()

require_parent = deps.require_role(RoleEnum.PARENT)
require_student = deps.require_role(RoleEnum.STUDENT)


@router.post("/links", response_model=APIResponse[ParentChildLinkResult])
async def create_link(
    *,
    db: Session = Depends(deps.get_transactional_db),
    link_in: ParentChildLinkRequest,
    response: Response,
    context: UserContext = Depends(require_parent)
):
    result = parent_child_service.request_link(db, link_in=link_in, current_user_context=context)
    if result.created:
        response.status_code = status.HTTP_201_CREATED
        return APIResponse(message="Link request sent successfully", data=result)
    return APIResponse(message="Link request sent again", data=result)


@router.get("/links", response_model=APIResponse[List[ParentChildLinkWithStudent]])
async def get_parent_links(
    *,
    db: Session = Depends(deps.get_db),
    context: UserContext = Depends(require_parent)
):
    links = parent_child_service.get_parent_links(db, current_user_context=context)
    return APIResponse(message="Linked students retrieved successfully", data=links)


@router.get("/links/pending", response_model=APIResponse[List[ParentChildLinkWithParent]])
async def get_pending_links(
    *,
    db: Session = Depends(deps.get_db),
    context: UserContext = Depends(require_student)
):
    links = parent_child_service.get_pending_links(db, current_user_context=context)
    return APIResponse(message="Pending link requests retrieved successfully", data=links)


@router.patch("/links/{link_id}/approve", response_model=APIResponse[ParentChildLink])
async def approve_link(
    *,
    db: Session = Depends(deps.get_transactional_db),
    link_id: int,
    context: UserContext = Depends(require_student)
):
    link = parent_child_service.approve_link(db, link_id=link_id, current_user_context=context)
    return APIResponse(message="Link approved successfully", data=link)


@router.patch("/links/{link_id}/reject", response_model=APIResponse[ParentChildLink])
async def reject_link(
    *,
    db: Session = Depends(deps.get_transactional_db),
    link_id: int,
    context: UserContext = Depends(require_student)
):
    link = parent_child_service.reject_link(db, link_id=link_id, current_user_context=context)
    return APIResponse(message="Link rejected successfully", data=link)


@router.delete("/links/{link_id}", response_model=APIResponse[None])
async def delete_link(
    *,
    db: Session = Depends(deps.get_transactional_db),
    link_id: int,
    context: UserContext = Depends(require_student)
):
    parent_child_service.delete_link(db, link_id=link_id, current_user_context=context)
    return APIResponse(message="Link deleted successfully")
