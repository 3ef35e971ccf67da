import secrets
from typing import Any, List, Optional
from sqlalchemy.orm import Session

from app.core.constants import RoleEnum, STUDENT_CODE_ALPHABET, STUDENT_CODE_LENGTH
from app.crud.base import CRUDBase
from app.models.user import User


class CRUDUser(CRUDBase[User, dict, dict]):
    def get_student(self, db: Session, *, id: Any) -> Optional[User]:
        return (
            db.query(User)
            .filter(User.id == id, User.role == RoleEnum.STUDENT, User.deleted_at == None)
            .first()
        )

    def get_student_by_code(self, db: Session, *, student_code: str) -> Optional[User]:
        return (
            db.query(User)
            .filter(User.student_code == student_code, User.role == RoleEnum.STUDENT, User.deleted_at == None)
            .first()
        )

    def get_by_role(self, db: Session, *, role: RoleEnum) -> List[User]:
        return db.query(User).filter(User.role == role, User.deleted_at == None, User.is_active == True).all()

    def student_code_exists(self, db: Session, *, student_code: str) -> bool:
        return db.query(User.id).filter(User.student_code == student_code).first() is not None

    def generate_student_code(self, db: Session) -> str:
        while True:
            code = "".join(secrets.choice(STUDENT_CODE_ALPHABET) for _ in range(STUDENT_CODE_LENGTH))
            if not self.student_code_exists(db, student_code=code):
                return code

    def create_with_role(self, db: Session, *, full_name: str, email: str, role: RoleEnum, is_active: bool = True) -> User:
        """Provision an account mirrored from the identity service. Students get a join code."""
        user_data = {"full_name": full_name, "email": email, "role": role, "is_active": is_active}
        if role == RoleEnum.STUDENT:
            user_data["student_code"] = self.generate_student_code(db)
        return self.create(db, obj_in=user_data)


user = CRUDUser(User)
