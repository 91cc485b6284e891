# backend/models/users.py
import uuid
from sqlalchemy import Column, String, DateTime, JSON, Uuid, func
from sqlalchemy.orm import relationship
from database import Base

# Represents an identity issued by the identity provider (signup credentials and metadata)
class User(Base):
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(String, unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)

    # Arbitrary signup metadata (full_name, role, ...) consumed by the provisioning hook
    raw_user_meta_data = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    # Profile and listings are removed together with the identity
    profile = relationship("Profile", back_populates="user", uselist=False, cascade="all, delete-orphan")
    products = relationship("Product", back_populates="seller", cascade="all, delete-orphan")
