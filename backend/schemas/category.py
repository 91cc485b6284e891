import uuid
from datetime import datetime
from pydantic import BaseModel, ConfigDict
from typing import Optional


# Schema for displaying a category
class CategoryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None
