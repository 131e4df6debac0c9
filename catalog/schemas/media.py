from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class MediaCreate(BaseModel):
    name: str = Field(..., min_length=1)
    url: Optional[str] = None


class MediaResponse(MediaCreate):
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
