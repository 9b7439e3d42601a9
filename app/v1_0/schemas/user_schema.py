from datetime import datetime
from enum import StrEnum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class UserStatus(StrEnum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"

    @property
    def toggled(self) -> "UserStatus":
        return UserStatus.INACTIVE if self is UserStatus.ACTIVE else UserStatus.ACTIVE


class UserRole(StrEnum):
    ADMIN = "ADMIN"
    EDITOR = "EDITOR"
    USER = "USER"


class BackendModel(BaseModel):
    """Lenient view over a camelCase backend payload."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra="allow",
    )


class AuditEntryOut(BackendModel):
    action: str
    performed_by: Optional[str] = None
    timestamp: Optional[datetime] = None
    details: Optional[str] = None


class UserOut(BackendModel):
    id: str
    username: Optional[str] = None
    email: Optional[str] = None
    name: Optional[str] = None
    roles: List[str] = Field(default_factory=list)
    status: UserStatus = UserStatus.ACTIVE
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    audit_trail: List[AuditEntryOut] = Field(default_factory=list)


class UserCreate(BaseModel):
    """Body sent to `POST /users`; new users always start ACTIVE."""
    username: Optional[str] = None
    email: Optional[str] = None
    name: Optional[str] = None
    roles: List[str] = Field(default_factory=list)
    status: UserStatus = UserStatus.ACTIVE

    model_config = {
        "json_schema_extra": {
            "example": {
                "username": "pre",
                "email": "pre@example.com",
                "name": "Pre",
                "roles": ["ADMIN"],
                "status": "ACTIVE",
            }
        }
    }


class UserStatusUpdate(BaseModel):
    status: UserStatus
