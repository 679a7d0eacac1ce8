from datetime import datetime

from pydantic import BaseModel, EmailStr, Field


class UserUpsert(BaseModel):
    # identity provider subject id; generated when omitted
    id: str | None = None
    email: EmailStr | None = None
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    user_type: str = Field(default="individual", pattern="^(individual|agency)$")
    permission_level: int = 0
    communication_preferences: dict[str, str] = Field(default_factory=dict)
    is_active: bool = True


class UserOut(BaseModel):
    id: str
    email: str | None
    first_name: str | None
    last_name: str | None
    phone: str | None
    user_type: str
    permission_level: int
    is_active: bool


class SessionCreate(BaseModel):
    ttl_minutes: int | None = Field(default=None, ge=1)


class SessionCreated(BaseModel):
    id: str
    user_id: str
    plain_token: str  # returned only once
    token_prefix: str
    expires_at: datetime | None
