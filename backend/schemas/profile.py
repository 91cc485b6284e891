import uuid
from datetime import datetime
from pydantic import BaseModel, ConfigDict
from typing import Optional

from models.profile import UserRole


# Output schema for profile details
class ProfileOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    email: Optional[str] = None
    full_name: Optional[str] = None
    role: UserRole
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# Schema for inserting one's own profile when none was provisioned
class ProfileCreate(BaseModel):
    id: uuid.UUID
    email: Optional[str] = None
    full_name: Optional[str] = None
    role: UserRole = UserRole.BUYER


# Schema for partial profile updates
class ProfileUpdate(BaseModel):
    email: Optional[str] = None
    full_name: Optional[str] = None
    role: Optional[UserRole] = None
