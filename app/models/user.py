from sqlalchemy import Boolean, Column, String, Integer, DateTime, Enum
from sqlalchemy.orm import validates
from sqlalchemy.sql import func
from app.core.database import Base
from app.core.constants import RoleEnum

class User(Base):
    """Account record owned by the identity service; only the fields the core reads are mapped."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    full_name = Column(String, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    role = Column(Enum(RoleEnum), nullable=False, index=True)
    student_code = Column(String, unique=True, index=True, nullable=True)  # join code, students only
    is_active = Column(Boolean(), default=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    @validates("student_code")
    def validate_student_code(self, key, value):
        if self.student_code is not None and value != self.student_code:
            raise ValueError("student_code cannot be changed once assigned")
        return value
