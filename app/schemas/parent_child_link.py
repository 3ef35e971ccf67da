from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime

from app.core.constants import LinkStatusEnum
from app.schemas.user import LinkedUser, StudentSummary


class ParentChildLinkRequest(BaseModel):
    """Exactly one of child_id / student_code identifies the student."""
    child_id: Optional[int] = Field(default=None, validation_alias=AliasChoices("child_id", "childId"))
    student_code: Optional[str] = Field(default=None, validation_alias=AliasChoices("student_code", "studentCode"))


class ParentChildLink(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    parent_id: int
    student_id: int
    student_code: Optional[str] = None
    status: LinkStatusEnum
    requested_at: datetime
    responded_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ParentChildLinkWithParent(ParentChildLink):
    parent: LinkedUser


class ParentChildLinkWithStudent(ParentChildLink):
    student: LinkedUser


class ParentChildLinkResult(BaseModel):
    link: ParentChildLink
    student: StudentSummary
    created: bool
