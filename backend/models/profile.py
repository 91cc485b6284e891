# backend/models/profile.py
import enum
from sqlalchemy import Column, String, DateTime, Enum, ForeignKey, Uuid, func
from sqlalchemy.orm import relationship
from database import Base

# Enumeration of marketplace roles (user_role)
class UserRole(str, enum.Enum):
    BUYER = "buyer"
    SELLER = "seller"

# One profile per identity, created by the signup provisioning hook
class Profile(Base):
    __tablename__ = "profiles"

    id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    email = Column(String, nullable=True)
    full_name = Column(String, nullable=True)
    role = Column(
        Enum(UserRole, name="user_role", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=UserRole.BUYER,
    )
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="profile")
