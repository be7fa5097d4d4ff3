import logging
import stripe
from fastapi import APIRouter, Depends, Header, HTTPException, Request

from pethub.api.auth import get_principal
from pethub.api.schemas import DonationCreateRequest, RefundRequest, StatusResponse
from pethub.core.dependencies import get_donation_service
from pethub.models.donation import DonationRecord
from pethub.models.user import Principal
from pethub.services.donation_service import DonationService

router = APIRouter(tags=["donations"])
logger = logging.getLogger(__name__)

@router.post("/donations", response_model=DonationRecord, status_code=201)
def create_donation(
    body: DonationCreateRequest,
    principal: Principal = Depends(get_principal),
    donations: DonationService = Depends(get_donation_service)
):
    return donations.confirm_and_record(body.campaign_id, body.transaction_id, principal)

@router.get("/donations/{email}", response_model=list[DonationRecord])
def list_donations(
    email: str,
    principal: Principal = Depends(get_principal),
    donations: DonationService = Depends(get_donation_service)
):
    return donations.list_donations_by_donor(email, principal)

@router.patch("/donations/{donation_id}/refund", response_model=DonationRecord)
def refund_donation(
    donation_id: str,
    body: RefundRequest,
    principal: Principal = Depends(get_principal),
    donations: DonationService = Depends(get_donation_service)
):
    return donations.refund_donation(donation_id, body.campaign_id, principal)

@router.post("/webhooks/stripe", response_model=StatusResponse)
async def handle_stripe_webhook(
    request: Request,
    stripe_signature: str = Header(...),
    donations: DonationService = Depends(get_donation_service)
):
    """
    Receives webhook events from Stripe, validates them,
    and queues them in SQS for background processing.
    """
    payload = await request.body()

    try:
        donations.queue_payment_webhook(
            payload=payload,
            signature_header=stripe_signature
        )
        return StatusResponse(status="queued")

    except stripe.SignatureVerificationError as e:
        logger.warning(f"Webhook signature verification failed: {e}")
        raise HTTPException(status_code=400, detail="Invalid signature")
    except ValueError as e:
        logger.warning(f"Webhook invalid payload: {e}")
        raise HTTPException(status_code=400, detail="Invalid payload")
