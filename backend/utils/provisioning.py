# utils/provisioning.py
# Handlers run synchronously after a new identity row is flushed, inside the
# signup transaction. They act with elevated privilege: repositories and their
# policies are not involved. An exception from any handler aborts the signup.
import json
import logging
from typing import Callable, List, Optional

from sqlalchemy.orm import Session

from models.profile import Profile, UserRole
from models.users import User
from utils.errors import InvalidRoleError

logger = logging.getLogger(__name__)

IdentityCreatedHandler = Callable[[Session, User], None]

_identity_created_handlers: List[IdentityCreatedHandler] = []


def on_identity_created(handler: IdentityCreatedHandler) -> IdentityCreatedHandler:
    """Register a handler for the identity-created event (usable as a decorator)."""
    if handler not in _identity_created_handlers:
        _identity_created_handlers.append(handler)
    return handler


def run_identity_created_hooks(db: Session, user: User) -> None:
    for handler in list(_identity_created_handlers):
        handler(db, user)


def _meta_text(meta: dict, key: str) -> Optional[str]:
    # Text value of a metadata key; JSON null and missing keys both give None
    value = meta.get(key)
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


def coerce_role(value: Optional[str]) -> UserRole:
    if value is None:
        return UserRole.BUYER
    try:
        return UserRole(value)
    except ValueError:
        raise InvalidRoleError(value)


@on_identity_created
def handle_new_user(db: Session, user: User) -> None:
    """Create the profile row matching a freshly inserted identity."""
    meta = user.raw_user_meta_data or {}
    profile = Profile(
        id=user.id,
        email=user.email,
        full_name=_meta_text(meta, "full_name") or "",
        role=coerce_role(_meta_text(meta, "role")),
    )
    db.add(profile)
    db.flush()
    logger.info("Provisioned %s profile for identity %s", profile.role.value, user.id)
