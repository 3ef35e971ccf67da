from typing import List, Optional
from sqlalchemy.orm import Session, joinedload

from app.crud.base import CRUDBase
from app.core.constants import LinkStatusEnum
from app.models.parent_child_link import ParentChildLink


class CRUDParentChildLink(CRUDBase[ParentChildLink, dict, dict]):

    def get_by_pair(self, db: Session, *, parent_id: int, student_id: int) -> Optional[ParentChildLink]:
        return (
            db.query(ParentChildLink)
            .filter(ParentChildLink.parent_id == parent_id)
            .filter(ParentChildLink.student_id == student_id)
            .first()
        )

    def get_approved_by_pair(self, db: Session, *, parent_id: int, student_id: int) -> Optional[ParentChildLink]:
        return (
            db.query(ParentChildLink)
            .filter(ParentChildLink.parent_id == parent_id)
            .filter(ParentChildLink.student_id == student_id)
            .filter(ParentChildLink.status == LinkStatusEnum.APPROVED)
            .first()
        )

    def get_for_student(self, db: Session, *, id: int, student_id: int) -> Optional[ParentChildLink]:
        return (
            db.query(ParentChildLink)
            .filter(ParentChildLink.id == id)
            .filter(ParentChildLink.student_id == student_id)
            .first()
        )

    def get_pending_for_student(self, db: Session, *, student_id: int) -> List[ParentChildLink]:
        return (
            db.query(ParentChildLink)
            .options(joinedload(ParentChildLink.parent))
            .filter(ParentChildLink.student_id == student_id)
            .filter(ParentChildLink.status == LinkStatusEnum.PENDING)
            .order_by(ParentChildLink.requested_at.desc())
            .all()
        )

    def get_approved_for_parent(self, db: Session, *, parent_id: int) -> List[ParentChildLink]:
        return (
            db.query(ParentChildLink)
            .options(joinedload(ParentChildLink.student))
            .filter(ParentChildLink.parent_id == parent_id)
            .filter(ParentChildLink.status == LinkStatusEnum.APPROVED)
            .order_by(ParentChildLink.responded_at.desc())
            .all()
        )

    def count_by_pair(self, db: Session, *, parent_id: int, student_id: int) -> int:
        return (
            db.query(ParentChildLink)
            .filter(ParentChildLink.parent_id == parent_id)
            .filter(ParentChildLink.student_id == student_id)
            .count()
        )


parent_child_link = CRUDParentChildLink(ParentChildLink)
