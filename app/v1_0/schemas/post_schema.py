from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from .user_schema import BackendModel


class PostOut(BackendModel):
    id: str
    title: Optional[str] = None
    content: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PostCreate(BaseModel):
    title: str
    content: str
