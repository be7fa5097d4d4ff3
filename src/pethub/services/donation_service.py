import json
import stripe
import logging
from botocore.exceptions import ClientError

from pethub.core.errors import InconsistentState, InvalidAmount, InvalidTransition, NotFound, PetHubError
from pethub.data_access.campaigns import CampaignRepository
from pethub.models.donation import DonationRecord, Donator
from pethub.models.user import Principal
from pethub.services.access_policy import AccessPolicy
from pethub.services.payment_gateway import PaymentGateway

logger = logging.getLogger(__name__)

class DonationService:
    def __init__(
        self,
        campaigns: CampaignRepository,
        payment_gateway: PaymentGateway,
        policy: AccessPolicy,
        sqs_client,
        payment_queue_url: str | None,
        notification_queue_url: str | None
    ):
        self.campaigns = campaigns
        self.payment_gateway = payment_gateway
        self.policy = policy
        self.sqs_client = sqs_client
        self.payment_queue_url = payment_queue_url
        self.notification_queue_url = notification_queue_url

    def record_donation(self, campaign_id: str, donator_email: str, amount: int,
                        transaction_id: str, donator_name: str | None = None) -> DonationRecord:
        """
        Books an already captured payment against a campaign. Calling it
        again with the same transaction id returns the original record.
        """
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise InvalidAmount("Donation amount must be a positive amount in cents")

        campaign = self.campaigns.get_campaign(campaign_id)
        record = DonationRecord(
            campaign_id=campaign_id,
            pet_name=campaign.pet_name if campaign else None,
            donator=Donator(
                email=donator_email,
                name=donator_name,
                transaction_id=transaction_id,
                donate_amount=amount,
            ),
        )

        try:
            stored, created = self.campaigns.record_donation(record)
        except (NotFound, InvalidTransition) as e:
            # The money was already captured; it cannot stay unbooked.
            self._refund_unbookable(campaign_id, transaction_id, e)
            raise type(e)(f"{e.message}; payment {transaction_id} was refunded")
        if not created:
            logger.info(f"Skipped duplicate processing for payment {transaction_id}.")
            return stored

        self._check_totals(campaign_id, donation_id=stored.donation_id, transaction_id=transaction_id)
        logger.info(f"Recorded donation {stored.donation_id} of {amount} to campaign {campaign_id}.")

        self._queue_notification({
            "type": "RECEIPT",
            "email_to": donator_email,
            "amount_cents": amount,
            "donation_id": stored.donation_id,
            "pet_name": stored.pet_name,
        })
        return stored

    def confirm_and_record(self, campaign_id: str, transaction_id: str, principal: Principal) -> DonationRecord:
        amount = self.payment_gateway.captured_amount(transaction_id)
        return self.record_donation(
            campaign_id=campaign_id,
            donator_email=principal.email,
            donator_name=principal.name,
            amount=amount,
            transaction_id=transaction_id,
        )

    def refund_donation(self, donation_id: str, campaign_id: str, principal: Principal) -> DonationRecord:
        record = self.campaigns.get_donation(donation_id)
        if record is not None:
            self.policy.enforce(principal, "donations:refund", record.donator.email)
        # Missing records, wrong campaign and double refunds are rejected here,
        # before any money moves.
        self._preflight_refund(donation_id, campaign_id, record)

        transaction_id = record.donator.transaction_id
        self.payment_gateway.refund(transaction_id)

        try:
            refunded = self.campaigns.refund_donation(donation_id, campaign_id)
        except (PetHubError, ClientError) as e:
            details = {
                "donation_id": donation_id,
                "campaign_id": campaign_id,
                "transaction_id": transaction_id,
            }
            logger.error(
                f"Payment {transaction_id} refunded but ledger update failed: {e}",
                extra={"details": details},
            )
            raise InconsistentState("Refund issued but the donation ledger was not updated", details=details)

        self._check_totals(campaign_id, donation_id=donation_id, transaction_id=transaction_id)
        logger.info(f"Refunded donation {donation_id} from campaign {campaign_id}.")

        self._queue_notification({
            "type": "REFUND",
            "email_to": record.donator.email,
            "amount_cents": record.donator.donate_amount,
            "donation_id": donation_id,
        })
        return refunded

    def list_donations_by_donor(self, email: str, principal: Principal) -> list[DonationRecord]:
        self.policy.enforce(principal, "donations:list_own", email)
        return self.campaigns.list_donations_by_donor(email)

    def queue_payment_webhook(self, payload: bytes, signature_header: str):
        try:
            event = self.payment_gateway.construct_event(payload, signature_header)

            self.sqs_client.send_message(
                QueueUrl=self.payment_queue_url,
                MessageBody=json.dumps(event)
            )
        except ValueError as e:
            logger.error(f"Webhook error: Invalid payload - {e}")
            raise
        except stripe.SignatureVerificationError as e:
            logger.error(f"Webhook error: Invalid signature - {e}")
            raise
        except ClientError as e:
            logger.error(f"SQS Error: {e}")
            raise

    def handle_payment_event(self, event_body: str):
        event = json.loads(event_body)

        if event['type'] == 'payment_intent.succeeded':
            intent = event['data']['object']
            metadata = intent.get('metadata', {})

            campaign_id = metadata.get('campaign_id')
            email = metadata.get('donator_email')
            if not campaign_id or not email:
                logger.warning(f"Payment {intent['id']} carries no campaign metadata, ignoring.")
                return

            try:
                self.record_donation(
                    campaign_id=campaign_id,
                    donator_email=email,
                    donator_name=metadata.get('donator_name'),
                    amount=intent['amount_received'],
                    transaction_id=intent['id'],
                )
            except (NotFound, InvalidTransition) as e:
                # Already refunded; redelivering the event cannot book it either.
                logger.warning(f"Payment event {intent['id']} not booked: {e}")

        elif event['type'] == 'payment_intent.payment_failed':
            intent = event['data']['object']
            logger.warning(f"Payment failed for intent {intent['id']}.")

        else:
            logger.warning(f"Received unhandled event type: {event['type']}")

    def _refund_unbookable(self, campaign_id: str, transaction_id: str, reason: PetHubError) -> None:
        details = {"transaction_id": transaction_id, "campaign_id": campaign_id}
        try:
            self.payment_gateway.refund(transaction_id)
        except PetHubError as e:
            logger.error(
                f"Payment {transaction_id} captured for unbookable campaign {campaign_id} and refund failed: {e}",
                extra={"details": details},
            )
            raise InconsistentState("Payment captured but neither booked nor refunded", details=details)
        logger.warning(
            f"Refunded payment {transaction_id}: campaign {campaign_id} cannot take it ({reason.message}).",
            extra={"details": details},
        )

    def _preflight_refund(self, donation_id: str, campaign_id: str, record: DonationRecord | None) -> None:
        if record is None or record.campaign_id != campaign_id:
            raise NotFound(f"Donation {donation_id} not found for campaign {campaign_id}")
        if record.refund:
            raise InvalidTransition(f"Donation {donation_id} has already been refunded")
        campaign = self.campaigns.get_campaign(campaign_id)
        if campaign is None:
            raise NotFound(f"Campaign {campaign_id} not found")
        if campaign.donator_index(record.donator.transaction_id) is None:
            raise InconsistentState(
                f"Donation {donation_id} has no donator entry in campaign {campaign_id}",
                details={"donation_id": donation_id, "campaign_id": campaign_id},
            )

    def _check_totals(self, campaign_id: str, **ids: str) -> None:
        campaign = self.campaigns.get_campaign(campaign_id)
        if campaign is None or campaign.totals_consistent():
            return
        details = {"campaign_id": campaign_id, **ids}
        logger.error(
            f"Campaign {campaign_id} total {campaign.donated_amount} does not match its donators.",
            extra={"details": details},
        )
        raise InconsistentState("Campaign total does not match its donators", details=details)

    def _queue_notification(self, job: dict) -> None:
        if not self.notification_queue_url:
            logger.debug(f"No notification queue configured, dropping {job['type']} job.")
            return
        self.sqs_client.send_message(
            QueueUrl=self.notification_queue_url,
            MessageBody=json.dumps(job)
        )
