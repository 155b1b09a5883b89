"""
Initialize database with default roles and an admin user

Admin credentials come from CONVERTIA_ADMIN_EMAIL / CONVERTIA_ADMIN_PASSWORD.
"""
import json
import os
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy.orm import Session
import structlog

from convertia.auth.service import (
    ROLE_ADMIN,
    ROLE_MANAGER,
    ROLE_RECRUITER,
    ROLE_RRHH,
    create_user,
    get_user_by_email,
)
from convertia.core.database import SessionLocal, init_db
from convertia.core.logging_config import configure_logging
from convertia.models.user import Role

logger = structlog.get_logger()

DEFAULT_ROLES = [
    (ROLE_ADMIN, "System administrator with full access", ["*"]),
    (ROLE_RECRUITER, "Manages jobs, candidates and applications",
     ["jobs:write", "candidates:write", "applications:write", "training:write"]),
    (ROLE_MANAGER, "Supervises recruiters and assigns applications",
     ["jobs:read", "candidates:read", "applications:assign", "campaigns:write"]),
    (ROLE_RRHH, "Human resources staff", ["rrhh:write"]),
]


def create_default_roles(db: Session):
    for name, description, permissions in DEFAULT_ROLES:
        if db.query(Role).filter(Role.name == name).first():
            logger.info("role_exists", role=name)
            continue
        db.add(Role(name=name, description=description, permissions=json.dumps(permissions)))
        logger.info("role_created", role=name)
    db.commit()


def create_admin_user(db: Session):
    email = os.environ.get("CONVERTIA_ADMIN_EMAIL", "admin@convertia.com")
    password = os.environ.get("CONVERTIA_ADMIN_PASSWORD")
    if not password:
        logger.warning("admin_password_missing", email=email)
        return

    if get_user_by_email(db, email):
        logger.info("admin_user_exists", email=email)
        return

    create_user(db, email=email, password=password, full_name="Administrator", role_names=[ROLE_ADMIN])
    logger.info("admin_user_created", email=email)


def main():
    configure_logging()
    logger.info("initializing_database")
    init_db()

    db: Session = SessionLocal()
    try:
        create_default_roles(db)
        create_admin_user(db)
        logger.info("database_initialization_complete")
    except Exception as e:
        logger.error("database_initialization_failed", error=str(e))
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
