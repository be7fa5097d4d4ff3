import boto3
import stripe
from functools import lru_cache

from pethub.core.config import get_settings
from pethub.data_access.adoption_requests import AdoptionRequestRepository
from pethub.data_access.campaigns import CampaignRepository
from pethub.data_access.pets import PetRepository
from pethub.data_access.users import UserRepository
from pethub.services.access_policy import AccessPolicy
from pethub.services.adoption_service import AdoptionService
from pethub.services.campaign_service import CampaignService
from pethub.services.donation_service import DonationService
from pethub.services.notification_service import NotificationService
from pethub.services.payment_gateway import PaymentGateway
from pethub.services.pet_service import PetService
from pethub.services.user_service import UserService


@lru_cache()
def get_boto_session() -> boto3.Session:
    settings = get_settings()
    return boto3.Session(
        region_name=settings.AWS_REGION,
        profile_name=settings.AWS_PROFILE
    )

@lru_cache()
def get_dynamo_table():
    session = get_boto_session()
    dynamo_resource = session.resource('dynamodb')
    return dynamo_resource.Table(get_settings().DYNAMODB_TABLE_NAME)

@lru_cache()
def get_access_policy() -> AccessPolicy:
    return AccessPolicy()

@lru_cache()
def get_pet_repository() -> PetRepository:
    return PetRepository(table=get_dynamo_table())

@lru_cache()
def get_user_service() -> UserService:
    return UserService(
        users=UserRepository(table=get_dynamo_table()),
        policy=get_access_policy()
    )

@lru_cache()
def get_pet_service() -> PetService:
    return PetService(pets=get_pet_repository(), policy=get_access_policy())

@lru_cache()
def get_adoption_service() -> AdoptionService:
    pets = get_pet_repository()
    return AdoptionService(
        requests=AdoptionRequestRepository(table=get_dynamo_table(), pets=pets),
        pets=pets,
        policy=get_access_policy()
    )

@lru_cache()
def get_campaign_repository() -> CampaignRepository:
    return CampaignRepository(table=get_dynamo_table())

@lru_cache()
def get_campaign_service() -> CampaignService:
    return CampaignService(campaigns=get_campaign_repository(), policy=get_access_policy())

@lru_cache()
def get_payment_gateway() -> PaymentGateway:
    settings = get_settings()
    if not settings.STRIPE_SECRET_KEY:
        raise ValueError("STRIPE_SECRET_KEY is required. Set it as an environment variable.")

    stripe.api_key = settings.STRIPE_SECRET_KEY
    return PaymentGateway(webhook_secret=settings.STRIPE_WEBHOOK_SECRET)

@lru_cache()
def get_notification_service() -> NotificationService:
    session = get_boto_session()
    return NotificationService(
        client=session.client('ses'),
        from_email=get_settings().SES_FROM_EMAIL
    )

@lru_cache()
def get_donation_service() -> DonationService:
    settings = get_settings()
    session = get_boto_session()

    return DonationService(
        campaigns=get_campaign_repository(),
        payment_gateway=get_payment_gateway(),
        policy=get_access_policy(),
        sqs_client=session.client('sqs'),
        payment_queue_url=settings.PAYMENT_QUEUE_URL,
        notification_queue_url=settings.NOTIFICATION_QUEUE_URL
    )
