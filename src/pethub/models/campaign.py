import uuid
from datetime import date, datetime
from pydantic import BaseModel, Field

from pethub.models.donation import Donator


class Campaign(BaseModel):
    campaign_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    creator_email: str

    pet_name: str
    pet_category: str | None = None
    pet_image: str | None = None

    target: int  # cents
    donated_amount: int = 0  # cents
    donators: list[Donator] = Field(default_factory=list)
    pause_status: bool = False

    last_date: date | None = None
    short_description: str | None = None
    long_description: str | None = None

    created_at: datetime = Field(default_factory=datetime.now)

    def totals_consistent(self) -> bool:
        return self.donated_amount == sum(d.donate_amount for d in self.donators)

    def donator_index(self, transaction_id: str) -> int | None:
        for index, donator in enumerate(self.donators):
            if donator.transaction_id == transaction_id:
                return index
        return None
