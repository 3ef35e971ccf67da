from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from pydantic import ValidationError
from sqlalchemy.orm import Session
from app.core.constants import RoleEnum
from app.core.database import SessionLocal
from app.core.exceptions import AuthenticationError, AuthorizationError
from app.core.security import decode_access_token
from app.crud.user import user as user_crud
from app.schemas.token import TokenPayload
from app.schemas.user import UserContext, User as UserSchema

http_bearer = HTTPBearer(auto_error=False)

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def get_transactional_db():
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

def _resolve_context(db: Session, token: str) -> UserContext:
    try:
        payload = decode_access_token(token)
        token_data = TokenPayload(**payload)
    except JWTError:
        raise AuthenticationError("Could not validate credentials")
    except ValidationError:
        raise AuthenticationError("Invalid token payload")

    if token_data.user_id is None:
        raise AuthenticationError("Invalid token payload")

    user = user_crud.get(db, id=token_data.user_id)
    if not user:
        raise AuthenticationError("User not found")

    if not user.is_active:
        raise AuthorizationError("User account is inactive")

    return UserContext(user=UserSchema.model_validate(user), role=user.role)

def get_current_user_with_context(
    db: Session = Depends(get_db),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(http_bearer)
) -> UserContext:
    if credentials is None:
        raise AuthenticationError("No token provided")
    return _resolve_context(db, credentials.credentials)

def get_optional_user_context(
    db: Session = Depends(get_db),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(http_bearer)
) -> Optional[UserContext]:
    """Context for endpoints that also serve anonymous visitors."""
    if credentials is None:
        return None
    return _resolve_context(db, credentials.credentials)

def require_role(*roles: RoleEnum):
    """Dependency that only lets callers acting under one of `roles` through."""
    def _verify_role(context: UserContext = Depends(get_current_user_with_context)) -> UserContext:
        if context.role not in roles:
            raise AuthorizationError("Insufficient permissions")
        return context
    return _verify_role
