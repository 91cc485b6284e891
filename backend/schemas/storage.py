import uuid
from datetime import datetime
from pydantic import BaseModel, ConfigDict
from typing import Optional


# Response schema for a stored bucket object
class StorageObjectOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    bucket_id: str
    name: str
    content_type: Optional[str] = None
    size: int
    created_at: Optional[datetime] = None
    public_url: Optional[str] = None
