import uuid
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field, ConfigDict
from typing import Optional, Dict, Any

from schemas.profile import ProfileOut

# Shared properties for identity models
class UserBase(BaseModel):
    email: EmailStr

# Schema for identity authentication credentials
class UserLogin(UserBase):
    password: str

# Schema for signup requests; `data` is free-form metadata (full_name, role)
class SignUpRequest(UserBase):
    password: str = Field(min_length=6)
    data: Optional[Dict[str, Any]] = None

# Output schema for identity details
class UserResponse(UserBase):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    raw_user_meta_data: Dict[str, Any] = {}
    created_at: Optional[datetime] = None

# Identity together with its provisioned profile
class MeResponse(UserResponse):
    profile: Optional[ProfileOut] = None

# Schema for JWT authentication token response
class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"

# Signup returns the new identity, its profile and a session token
class SignUpResponse(Token):
    user: MeResponse
