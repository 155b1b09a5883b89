"""
Authentication service layer
"""
from datetime import timedelta
from typing import Optional
from sqlalchemy.orm import Session
from jose import jwt
from passlib.context import CryptContext
import structlog

from convertia.core.clock import utcnow
from convertia.core.config import settings
from convertia.core.exceptions import ConflictError
from convertia.models.user import User, Role

logger = structlog.get_logger()

ROLE_ADMIN = "admin"
ROLE_RECRUITER = "recruiter"
ROLE_MANAGER = "manager"
ROLE_RRHH = "rrhh"

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash"""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password"""
    return pwd_context.hash(password)


def _encode_token(data: dict, expires_delta: timedelta, token_type: str) -> str:
    to_encode = data.copy()
    to_encode.update({"exp": utcnow() + expires_delta, "type": token_type})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token"""
    return _encode_token(
        data,
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        "access",
    )


def create_refresh_token(data: dict) -> str:
    """Create JWT refresh token"""
    return _encode_token(data, timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS), "refresh")


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    """Authenticate user with email and password"""
    user = get_user_by_email(db, email)
    if not user:
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    """Get user by email"""
    return db.query(User).filter(User.email == email).first()


def get_user_by_id(db: Session, user_id: int) -> Optional[User]:
    """Get user by ID"""
    return db.query(User).filter(User.id == user_id).first()


def get_or_create_role(db: Session, name: str, description: Optional[str] = None) -> Role:
    role = db.query(Role).filter(Role.name == name).first()
    if role is None:
        role = Role(name=name, description=description)
        db.add(role)
        db.flush()
    return role


def create_user(
    db: Session,
    email: str,
    password: str,
    full_name: Optional[str] = None,
    role_names: Optional[list[str]] = None,
) -> User:
    """Create a new user with roles"""
    if get_user_by_email(db, email):
        raise ConflictError(f"User with email {email} already exists")

    user = User(
        email=email,
        hashed_password=get_password_hash(password),
        full_name=full_name,
    )
    db.add(user)

    # Default role: recruiter
    user.roles = [get_or_create_role(db, name) for name in (role_names or [ROLE_RECRUITER])]

    db.commit()
    db.refresh(user)

    logger.info("user_created", user_id=user.id, email=email, roles=user.role_names)
    return user


def update_user_last_login(db: Session, user: User):
    """Update user's last login timestamp"""
    user.last_login = utcnow()
    db.commit()
