import uuid
from datetime import datetime
from pydantic import BaseModel, Field


class Donator(BaseModel):
    email: str
    name: str | None = None
    transaction_id: str
    donate_amount: int  # cents

class DonationRecord(BaseModel):
    donation_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    campaign_id: str
    pet_name: str | None = None
    donator: Donator
    refund: bool = False

    created_at: datetime = Field(default_factory=datetime.now)
