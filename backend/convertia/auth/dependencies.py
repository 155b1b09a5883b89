"""
Authentication dependencies for FastAPI routes
"""
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
from jose import JWTError, jwt
import structlog

from convertia.core.database import get_db
from convertia.core.config import settings
from convertia.core.exceptions import AuthenticationError, AuthorizationError
from convertia.models.user import User
from convertia.auth.service import get_user_by_email

logger = structlog.get_logger()

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/v1/auth/login")


def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    """
    Get current authenticated user from JWT token
    """
    try:
        payload = jwt.decode(
            token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM]
        )
    except JWTError:
        raise AuthenticationError("Invalid token")

    email = payload.get("sub")
    if email is None or payload.get("type") != "access":
        raise AuthenticationError("Invalid token")

    user = get_user_by_email(db, email)
    if user is None:
        raise AuthenticationError("User not found")

    if not user.is_active:
        raise AuthenticationError("User is inactive")

    return user


def get_current_active_user(
    current_user: User = Depends(get_current_user),
) -> User:
    """Get current active user"""
    return current_user


def require_any_role(*role_names: str):
    """
    Dependency factory for requiring any of the specified roles
    Usage: current_user: User = Depends(require_any_role("admin", "rrhh"))
    """
    def role_checker(current_user: User = Depends(get_current_active_user)) -> User:
        user_roles = current_user.role_names
        if not any(role in user_roles for role in role_names):
            logger.warning(
                "unauthorized_access_attempt",
                user_id=current_user.id,
                required_roles=list(role_names),
                user_roles=user_roles,
            )
            raise AuthorizationError(
                f"Requires one of: {', '.join(role_names)}",
                details={"required_roles": list(role_names), "user_roles": user_roles},
            )
        return current_user

    return role_checker
