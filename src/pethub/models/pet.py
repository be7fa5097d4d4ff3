import uuid
from datetime import datetime
from pydantic import BaseModel, Field
from typing import Literal


ListingStatus = Literal["LISTED", "ADOPTION_REQUESTED", "ADOPTED"]

class Pet(BaseModel):
    pet_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str
    category: str
    age: int | None = None
    location: str | None = None
    image_url: str | None = None
    short_description: str | None = None
    long_description: str | None = None

    adopted: bool = False
    listing_status: ListingStatus = "LISTED"
    pending_requests: int = 0

    owner_email: str
    creator_email: str

    created_at: datetime = Field(default_factory=datetime.now)


def listing_status_for(adopted: bool, pending_requests: int) -> ListingStatus:
    if adopted:
        return "ADOPTED"
    return "ADOPTION_REQUESTED" if pending_requests > 0 else "LISTED"
