# tests/conftest.py
"""
Pytest configuration and fixtures.
DynamoDB runs under moto; the payment gateway and SQS client are fakes.
"""

import json
import os

os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")
os.environ.setdefault("AWS_DEFAULT_REGION", "eu-central-1")
os.environ["API_ROOT_PATH"] = ""

from unittest.mock import MagicMock

import boto3
import pytest
from moto import mock_aws

from pethub.core.errors import PaymentGatewayError, PaymentNotCaptured
from pethub.data_access.adoption_requests import AdoptionRequestRepository
from pethub.data_access.campaigns import CampaignRepository
from pethub.data_access.pets import PetRepository
from pethub.data_access.schema import create_table
from pethub.data_access.users import UserRepository
from pethub.models.user import Principal
from pethub.services.access_policy import AccessPolicy
from pethub.services.adoption_service import AdoptionService
from pethub.services.campaign_service import CampaignService
from pethub.services.donation_service import DonationService
from pethub.services.pet_service import PetService
from pethub.services.user_service import UserService

NOTIFICATION_QUEUE = "https://sqs.eu-central-1.amazonaws.com/000000000000/notifications"
PAYMENT_QUEUE = "https://sqs.eu-central-1.amazonaws.com/000000000000/payments"

ALICE = "alice@petlovers.org"
BOB = "bob@petlovers.org"
ADMIN = "admin@petlovers.org"


class FakeGateway:
    """Stands in for Stripe: payment intents are registered by the test."""

    def __init__(self):
        self.captured = {}
        self.refunded = []
        self.fail_refunds = False

    def capture(self, transaction_id: str, amount: int):
        self.captured[transaction_id] = amount

    def captured_amount(self, transaction_id: str) -> int:
        if transaction_id not in self.captured:
            raise PaymentNotCaptured(f"Payment {transaction_id} has not been captured")
        return self.captured[transaction_id]

    def refund(self, transaction_id: str) -> str:
        if self.fail_refunds:
            raise PaymentGatewayError("Payment provider error")
        self.refunded.append(transaction_id)
        return f"re_{transaction_id}"

    def construct_event(self, payload: bytes, signature_header: str):
        if signature_header != "valid":
            raise ValueError("bad payload")
        return json.loads(payload)


@pytest.fixture
def table():
    with mock_aws():
        resource = boto3.resource("dynamodb", region_name="eu-central-1")
        yield create_table(resource, "pethub-test")


@pytest.fixture
def policy():
    return AccessPolicy()


@pytest.fixture
def alice():
    return Principal(email=ALICE, name="Alice")


@pytest.fixture
def bob():
    return Principal(email=BOB, name="Bob")


@pytest.fixture
def admin():
    return Principal(email=ADMIN, name="Admin", role="admin")


@pytest.fixture
def user_repo(table):
    return UserRepository(table=table)


@pytest.fixture
def pet_repo(table):
    return PetRepository(table=table)


@pytest.fixture
def campaign_repo(table):
    return CampaignRepository(table=table)


@pytest.fixture
def user_service(user_repo, policy):
    return UserService(users=user_repo, policy=policy)


@pytest.fixture
def pet_service(pet_repo, policy):
    return PetService(pets=pet_repo, policy=policy)


@pytest.fixture
def adoption_service(table, pet_repo, policy):
    return AdoptionService(
        requests=AdoptionRequestRepository(table=table, pets=pet_repo),
        pets=pet_repo,
        policy=policy,
    )


@pytest.fixture
def campaign_service(campaign_repo, policy):
    return CampaignService(campaigns=campaign_repo, policy=policy)


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def sqs_client():
    return MagicMock()


@pytest.fixture
def donation_service(campaign_repo, gateway, policy, sqs_client):
    return DonationService(
        campaigns=campaign_repo,
        payment_gateway=gateway,
        policy=policy,
        sqs_client=sqs_client,
        payment_queue_url=PAYMENT_QUEUE,
        notification_queue_url=NOTIFICATION_QUEUE,
    )


@pytest.fixture
def carol():
    return Principal(email="carol@petlovers.org", name="Carol")
