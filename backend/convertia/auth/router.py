"""
Authentication routes
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from jose import jwt, JWTError
import structlog

from convertia.core.config import settings
from convertia.core.database import get_db
from convertia.core.exceptions import AuthenticationError
from convertia.auth.dependencies import get_current_active_user, require_any_role
from convertia.auth.service import (
    ROLE_ADMIN,
    authenticate_user,
    create_access_token,
    create_refresh_token,
    create_user,
    get_user_by_email,
    update_user_last_login,
)
from convertia.auth.schemas import (
    Token,
    LoginRequest,
    UserCreate,
    UserResponse,
    RefreshTokenRequest,
)
from convertia.models.user import User

router = APIRouter(prefix="/api/v1/auth", tags=["Authentication"])
logger = structlog.get_logger()


def _user_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        email=user.email,
        full_name=user.full_name,
        is_active=user.is_active,
        is_verified=user.is_verified,
        last_login=user.last_login,
        roles=user.role_names,
        created_at=user.created_at,
    )


def _issue_tokens(user: User) -> Token:
    claims = {"sub": user.email, "user_id": user.id}
    return Token(
        access_token=create_access_token(data=claims),
        refresh_token=create_refresh_token(data=claims),
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register(
    user_data: UserCreate,
    current_user: User = Depends(require_any_role(ROLE_ADMIN)),
    db: Session = Depends(get_db),
):
    """Create a console user (admin only)"""
    user = create_user(
        db=db,
        email=user_data.email,
        password=user_data.password,
        full_name=user_data.full_name,
        role_names=user_data.role_names,
    )
    return _user_response(user)


@router.post("/login", response_model=Token)
def login(
    credentials: LoginRequest,
    db: Session = Depends(get_db),
):
    """Authenticate user and return tokens"""
    user = authenticate_user(db, credentials.email, credentials.password)
    if not user:
        logger.warning("failed_login_attempt", email=credentials.email)
        raise AuthenticationError("Incorrect email or password")

    if not user.is_active:
        raise AuthenticationError("User account is inactive")

    update_user_last_login(db, user)

    logger.info("user_logged_in", user_id=user.id, email=user.email)
    return _issue_tokens(user)


@router.post("/refresh", response_model=Token)
def refresh_token(
    token_data: RefreshTokenRequest,
    db: Session = Depends(get_db),
):
    """Refresh access token using refresh token"""
    try:
        payload = jwt.decode(
            token_data.refresh_token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
        )
    except JWTError:
        raise AuthenticationError("Invalid refresh token")

    if payload.get("type") != "refresh":
        raise AuthenticationError("Invalid token type")

    email = payload.get("sub")
    if email is None:
        raise AuthenticationError("Invalid token")

    user = get_user_by_email(db, email)
    if not user or not user.is_active:
        raise AuthenticationError("User not found or inactive")

    return _issue_tokens(user)


@router.get("/me", response_model=UserResponse)
def get_current_user_info(
    current_user: User = Depends(get_current_active_user),
):
    """Get current user information"""
    return _user_response(current_user)
