from pydantic import BaseModel, EmailStr, Field
from typing import Literal, Optional
from datetime import date

from pethub.models.user import Role, UserStatus

class CognitoUser(BaseModel):
    sub: str  # The unique user ID from Cognito
    email: EmailStr
    email_verified: bool
    name: Optional[str] = None

class ErrorResponse(BaseModel):
    error: str
    message: str

class LoginRequest(BaseModel):
    email: EmailStr
    name: Optional[str] = None
    photo_url: Optional[str] = None
    status: Optional[UserStatus] = None

class RoleChangeRequest(BaseModel):
    role: Role

class PetCreateRequest(BaseModel):
    name: str
    category: str
    age: Optional[int] = None
    location: Optional[str] = None
    image_url: Optional[str] = None
    short_description: Optional[str] = None
    long_description: Optional[str] = None

class PetUpdateRequest(BaseModel):
    name: Optional[str] = None
    category: Optional[str] = None
    age: Optional[int] = None
    location: Optional[str] = None
    image_url: Optional[str] = None
    short_description: Optional[str] = None
    long_description: Optional[str] = None

class AdoptedUpdateRequest(BaseModel):
    adopted: bool

class AdoptionRequestCreate(BaseModel):
    pet_id: str
    requester_name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None

class CreatedResponse(BaseModel):
    id: str

class CampaignCreateRequest(BaseModel):
    pet_name: str
    pet_category: Optional[str] = None
    pet_image: Optional[str] = None
    target: int = Field(description="Target amount in cents")
    last_date: Optional[date] = None
    short_description: Optional[str] = None
    long_description: Optional[str] = None

class CampaignUpdateRequest(BaseModel):
    pet_name: Optional[str] = None
    pet_image: Optional[str] = None
    target: Optional[int] = None
    last_date: Optional[date] = None
    short_description: Optional[str] = None
    long_description: Optional[str] = None

class PauseRequest(BaseModel):
    pause_status: bool

class DonationCreateRequest(BaseModel):
    campaign_id: str
    transaction_id: str

class RefundRequest(BaseModel):
    campaign_id: str

class StatusResponse(BaseModel):
    status: Literal["ok", "queued"] = "ok"
