# backend/models/storage.py
import uuid
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, JSON, Uuid, UniqueConstraint, func
from sqlalchemy.orm import relationship
from database import Base

# Named storage partition with its own size limit and allowed content types
class Bucket(Base):
    __tablename__ = "storage_buckets"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False, unique=True)
    public = Column(Boolean, nullable=False, default=False)
    file_size_limit = Column(Integer, nullable=True) # Bytes, None means unlimited
    allowed_mime_types = Column(JSON, nullable=True) # List of content types, None means any
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    objects = relationship("StorageObject", back_populates="bucket", cascade="all, delete-orphan")


# Metadata row of a stored file; the bytes live in the storage backend under bucket_id/name
class StorageObject(Base):
    __tablename__ = "storage_objects"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    bucket_id = Column(String, ForeignKey("storage_buckets.id"), nullable=False, index=True)
    name = Column(String, nullable=False) # "{owner_id}/{epoch_millis}.{ext}"
    owner_id = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    content_type = Column(String, nullable=True)
    size = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    bucket = relationship("Bucket", back_populates="objects")

    __table_args__ = (
        # Object names are unique within a bucket
        UniqueConstraint("bucket_id", "name", name="uq_storage_object_bucket_name"),
    )
