from app.core.constants import RoleEnum
from app.core.exceptions import AuthorizationError
from app.models.content import Content
from app.schemas.user import UserContext


class PermissionHelper:
    @staticmethod
    def is_admin(context: UserContext) -> bool:
        return context.role == RoleEnum.ADMIN

    @staticmethod
    def is_teacher(context: UserContext) -> bool:
        return context.role == RoleEnum.TEACHER

    @staticmethod
    def is_student(context: UserContext) -> bool:
        return context.role == RoleEnum.STUDENT

    @staticmethod
    def is_parent(context: UserContext) -> bool:
        return context.role == RoleEnum.PARENT

    @staticmethod
    def is_uploader(context: UserContext, content: Content) -> bool:
        return content.uploader_id == context.user.id

    @staticmethod
    def require_role(context: UserContext, *roles: RoleEnum, error_message: str = "Insufficient permissions"):
        if context.role not in roles:
            raise AuthorizationError(error_message)

    @staticmethod
    def require_admin(context: UserContext, error_message: str = "Only admins can perform this action."):
        if not PermissionHelper.is_admin(context):
            raise AuthorizationError(error_message)

    @staticmethod
    def require_student(context: UserContext, error_message: str = "Only students can perform this action."):
        if not PermissionHelper.is_student(context):
            raise AuthorizationError(error_message)

