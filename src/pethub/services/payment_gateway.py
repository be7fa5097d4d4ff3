import logging
import stripe

from pethub.core.errors import PaymentGatewayError, PaymentNotCaptured

logger = logging.getLogger(__name__)

class PaymentGateway:
    """
    Stripe-facing collaborator. The ledger never charges cards itself; it
    only asks what was captured for a payment intent and issues refunds.
    """

    def __init__(self, webhook_secret: str | None = None):
        self.webhook_secret = webhook_secret

    def captured_amount(self, transaction_id: str) -> int:
        try:
            intent = stripe.PaymentIntent.retrieve(transaction_id)
        except stripe.StripeError as e:
            logger.error(f"Error retrieving payment intent {transaction_id}: {e}")
            raise PaymentGatewayError("Payment provider error")

        if intent.status != "succeeded":
            raise PaymentNotCaptured(f"Payment {transaction_id} has not been captured")
        return intent.amount_received

    def refund(self, transaction_id: str) -> str:
        try:
            refund = stripe.Refund.create(
                payment_intent=transaction_id,
                idempotency_key=f"refund-{transaction_id}",
            )
        except stripe.StripeError as e:
            logger.error(f"Error refunding payment intent {transaction_id}: {e}")
            raise PaymentGatewayError("Payment provider error")
        return refund.id

    def construct_event(self, payload: bytes, signature_header: str):
        return stripe.Webhook.construct_event(
            payload=payload,
            sig_header=signature_header,
            secret=self.webhook_secret
        )
