from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_serializer


class AdminUser(BaseModel):
    email: str
    name: str = "Admin"
    is_admin: bool = True


class TokenData(BaseModel):
    sub: str = Field(description="Subject of the token, the admin e-mail")
    exp: datetime
    iat: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class Token(BaseModel):
    access_token: str = Field(min_length=10)
    token_type: str = Field(default="bearer", pattern="^bearer$")
    expire_datetime: datetime

    @field_serializer("expire_datetime")
    def serialize_datetime(self, dt: datetime) -> str:
        return dt.isoformat()
