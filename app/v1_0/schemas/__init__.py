from .user_schema import (
    UserStatus,
    UserRole,
    BackendModel,
    AuditEntryOut,
    UserOut,
    UserCreate,
    UserStatusUpdate,
)
from .preferences_schema import PreferencesOut, PreferencesUpsert
from .post_schema import PostOut, PostCreate
__all__ = [
    "UserStatus", "UserRole", "BackendModel",
    "AuditEntryOut", "UserOut", "UserCreate", "UserStatusUpdate",
    "PreferencesOut", "PreferencesUpsert",
    "PostOut", "PostCreate",
]
