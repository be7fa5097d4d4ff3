import uuid
from datetime import datetime
from pydantic import BaseModel, Field
from typing import Literal


Decision = Literal["accept", "reject"]

class AdoptionRequest(BaseModel):
    request_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    pet_id: str
    pet_name: str | None = None

    requester_email: str
    requester_name: str | None = None
    phone: str | None = None
    address: str | None = None

    present_owner_email: str

    created_at: datetime = Field(default_factory=datetime.now)
