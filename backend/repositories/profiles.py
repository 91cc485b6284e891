# repositories/profiles.py
from typing import Any, Dict, Optional

from config import settings
from models.profile import Profile, UserRole
from repositories.base import PolicyRepository
from utils.errors import PolicyViolation


class ProfileRepository(PolicyRepository):
    model = Profile

    def exists(self, profile_id) -> bool:
        # Existence is checked with elevated privilege: a hidden row still blocks an insert
        return self.db.get(Profile, profile_id) is not None

    def update(self, row_id, changes: Dict[str, Any]) -> Optional[Profile]:
        if changes.get("role") is not None:
            changes = {**changes, "role": UserRole(changes["role"])}
            if not settings.ALLOW_ROLE_SELF_UPDATE:
                current = self.get(row_id)
                if current is not None and current.role != changes["role"]:
                    raise PolicyViolation(self.table, "Changing your own role is not permitted")
        return super().update(row_id, changes)
