from pydantic import BaseModel, ConfigDict
from typing import Optional

from app.core.constants import RoleEnum

class User(BaseModel):
    """Main user schema for reading user data."""
    id: int
    full_name: Optional[str] = None
    email: str
    role: RoleEnum
    is_active: bool
    model_config = ConfigDict(from_attributes=True)

class StudentSummary(BaseModel):
    id: int
    full_name: Optional[str] = None
    student_code: Optional[str] = None
    model_config = ConfigDict(from_attributes=True)

class LinkedUser(BaseModel):
    """Contact details shown to the other side of a parent-child link."""
    id: int
    full_name: Optional[str] = None
    email: Optional[str] = None
    student_code: Optional[str] = None
    model_config = ConfigDict(from_attributes=True)

class UserContext(BaseModel):
    """The authenticated caller: who they are and the role they act under."""
    user: User
    role: RoleEnum
    model_config = ConfigDict(from_attributes=True)
