# backend/models/product.py
import uuid
from sqlalchemy import Column, Integer, String, Numeric, Boolean, DateTime, ForeignKey, Uuid, func
from sqlalchemy.orm import relationship
from database import Base

# Product model
# A single listing owned by a seller identity.
# Quantity is not guarded by a check constraint: the purchase operation
# decrements it conditionally so it never drops below zero.
class Product(Base):
    __tablename__ = "products"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    seller_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String, nullable=False, index=True)
    description = Column(String, nullable=True)

    # Fixed-point price with two decimals.
    price = Column(Numeric(10, 2), nullable=False)
    quantity = Column(Integer, nullable=False, default=0)

    category_id = Column(Uuid, ForeignKey("categories.id"), nullable=True, index=True)

    # Optional public URL of the product image in the product-images bucket.
    image_url = Column(String, nullable=True)

    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    seller = relationship("User", back_populates="products")
    category = relationship("Category")
