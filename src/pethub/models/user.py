from datetime import datetime
from pydantic import BaseModel, Field, EmailStr
from typing import Literal


Role = Literal["user", "admin"]
UserStatus = Literal["none", "Requested", "verified"]

class User(BaseModel):
    email: EmailStr
    name: str | None = None
    photo_url: str | None = None
    role: Role = "user"
    status: UserStatus = "none"
    joined_at: datetime = Field(default_factory=datetime.now)

class Principal(BaseModel):
    """The authenticated caller, with the role held in the identity store."""
    email: str
    name: str | None = None
    role: Role = "user"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
