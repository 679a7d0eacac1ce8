from pydantic import BaseModel


class MeOut(BaseModel):
    id: str
    email: str | None
    first_name: str | None
    last_name: str | None
    phone: str | None
    user_type: str
    permission_level: int
    is_moderator: bool
