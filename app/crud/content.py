from typing import List, Optional, Tuple
from sqlalchemy import func, or_
from sqlalchemy.orm import Session, Query

from app.crud.base import CRUDBase, paginate_query
from app.core.constants import ApprovalStatusEnum, ContentTypeEnum, RoleEnum
from app.models.content import Content
from app.schemas.content import ContentCreate, ContentUpdate
from app.schemas.user import UserContext


def restrict_to_visible(query: Query, viewer: Optional[UserContext]) -> Query:
    """Apply the visibility rules for Content to any query that selects or joins it.

    Every read path for content goes through here. Deleted rows are never
    visible; admins see everything else; teachers see approved content plus
    their own; everyone else (students, parents, anonymous) sees approved
    content only, whatever filters the client asked for.
    """
    query = query.filter(Content.deleted_at.is_(None))
    if viewer is not None and viewer.role == RoleEnum.ADMIN:
        return query
    if viewer is not None and viewer.role == RoleEnum.TEACHER:
        return query.filter(
            or_(
                Content.approval_status == ApprovalStatusEnum.APPROVED,
                Content.uploader_id == viewer.user.id,
            )
        )
    return query.filter(Content.approval_status == ApprovalStatusEnum.APPROVED)


class CRUDContent(CRUDBase[Content, ContentCreate, ContentUpdate]):

    def _query_visible(self, db: Session, viewer: Optional[UserContext]) -> Query:
        return restrict_to_visible(db.query(Content), viewer)

    def get_visible(self, db: Session, *, id: int, viewer: Optional[UserContext]) -> Optional[Content]:
        return self._query_visible(db, viewer).filter(Content.id == id).first()

    def get_for_update(self, db: Session, *, id: int) -> Optional[Content]:
        """Non-deleted row regardless of approval state; callers authorize before mutating."""
        return db.query(Content).filter(Content.id == id, Content.deleted_at.is_(None)).first()

    def get_multi_visible(
        self,
        db: Session,
        *,
        viewer: Optional[UserContext],
        page: int,
        size: int,
        class_id: Optional[int] = None,
        subject_id: Optional[int] = None,
        chapter_id: Optional[int] = None,
        type: Optional[ContentTypeEnum] = None,
        approval_status: Optional[ApprovalStatusEnum] = None,
        is_admin_content: Optional[bool] = None,
        uploader_id: Optional[int] = None,
        order_by_updated: bool = False,
    ) -> Tuple[List[Content], int]:
        query = db.query(Content)
        if class_id is not None:
            query = query.filter(Content.class_id == class_id)
        if subject_id is not None:
            query = query.filter(Content.subject_id == subject_id)
        if chapter_id is not None:
            query = query.filter(Content.chapter_id == chapter_id)
        if type is not None:
            query = query.filter(Content.type == type)
        if approval_status is not None:
            query = query.filter(Content.approval_status == approval_status)
        if is_admin_content is not None:
            query = query.filter(Content.is_admin_content == is_admin_content)
        if uploader_id is not None:
            query = query.filter(Content.uploader_id == uploader_id)

        query = restrict_to_visible(query, viewer)
        order_column = func.coalesce(Content.updated_at, Content.created_at) if order_by_updated else Content.created_at
        query = query.order_by(order_column.desc(), Content.id.desc())
        return paginate_query(query, page=page, size=size)


content = CRUDContent(Content)
