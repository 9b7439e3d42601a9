from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from .user_schema import BackendModel


class PreferencesOut(BackendModel):
    theme: Optional[str] = None
    language: Optional[str] = None
    notifications_enabled: bool = False
    updated_at: Optional[datetime] = None


class PreferencesUpsert(BaseModel):
    """Default preferences created for a user that has none."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    theme: str = "light"
    language: str = "en"
    notifications_enabled: bool = True
