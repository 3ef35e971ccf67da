from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Enum, UniqueConstraint, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base
from app.core.constants import LinkStatusEnum


class ParentChildLink(Base):
    __tablename__ = "parent_child_links"

    id = Column(Integer, primary_key=True, index=True)
    parent_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    student_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    student_code = Column(String, nullable=True)
    status = Column(Enum(LinkStatusEnum), nullable=False, default=LinkStatusEnum.PENDING)
    requested_at = Column(DateTime(timezone=True), nullable=False)
    responded_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    parent = relationship("User", foreign_keys=[parent_id])
    student = relationship("User", foreign_keys=[student_id])

    # One row per pair regardless of status; a rejected link is reused on re-request
    __table_args__ = (
        UniqueConstraint("parent_id", "student_id", name="uq_parent_child_link_pair"),
        Index("ix_parent_child_links_student_status", "student_id", "status"),
        Index("ix_parent_child_links_parent_status", "parent_id", "status"),
    )
