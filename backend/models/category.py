import uuid
from sqlalchemy import Column, String, DateTime, Uuid, func
from database import Base


# Product category, readable by everyone; only seeded or inserted by privileged scripts
class Category(Base):
    __tablename__ = "categories"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
