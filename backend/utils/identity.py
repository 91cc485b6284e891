# utils/identity.py
import logging
import uuid
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from models.users import User
from utils.errors import IdentityExistsError
from utils.hashing import get_password_hash, verify_password
from utils.provisioning import run_identity_created_hooks

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def create_identity(db: Session, email: str, password: str, metadata: Optional[dict] = None) -> User:
    """Insert a new identity and run the identity-created hooks in one transaction.

    Nothing is persisted when a hook fails (e.g. an invalid role in the
    signup metadata): the identity insert is rolled back with it.
    """
    normalized_email = normalize_email(email)
    exists = db.query(User).filter(func.lower(User.email) == normalized_email).first()
    if exists:
        raise IdentityExistsError(normalized_email)

    user = User(
        email=normalized_email,
        password_hash=get_password_hash(password),
        raw_user_meta_data=dict(metadata or {}),
    )
    try:
        db.add(user)
        db.flush()
        run_identity_created_hooks(db, user)
        db.commit()
    except Exception:
        db.rollback()
        logger.warning("Signup aborted for %s", normalized_email)
        raise

    db.refresh(user)
    return user


def authenticate(db: Session, email: str, password: str) -> Optional[User]:
    user = db.query(User).filter(User.email == normalize_email(email)).first()
    if not user or not verify_password(password, user.password_hash):
        return None
    return user


def delete_identity(db: Session, user_id: uuid.UUID) -> bool:
    """Delete an identity; its profile and products go with it."""
    user = db.get(User, user_id)
    if user is None:
        return False
    db.delete(user)
    db.commit()
    return True
