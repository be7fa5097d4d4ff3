import logging
from botocore.exceptions import ClientError
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

logger = logging.getLogger(__name__)


def format_amount(amount_cents: int) -> str:
    return f"{amount_cents // 100}.{amount_cents % 100:02d}"


class NotificationService:
    def __init__(self, client, from_email: str):
        self.ses_client = client
        self.from_email = from_email

    @retry(
        wait=wait_exponential(multiplier=1, min=1, max=4),
        stop=stop_after_attempt(3),
        retry=retry_if_exception_type(ClientError)
    )
    def _send(self, email_to: str, subject: str, body_text: str):
        logger.info(f"Attempting to send email to {email_to}...")

        self.ses_client.send_email(
            Source=self.from_email,
            Destination={'ToAddresses': [email_to]},
            Message={
                'Subject': {'Data': subject},
                'Body': {'Text': {'Data': body_text}}
            }
        )

        logger.info(f"Successfully sent email to {email_to}")

    def send_donation_receipt(self, email_to: str, amount_cents: int, donation_id: str, pet_name: str | None = None):
        campaign = f" to the campaign for {pet_name}" if pet_name else ""
        body_text = (
            f"Hello,\n\n"
            f"Thank you for your generous donation of ${format_amount(amount_cents)}{campaign}.\n"
            f"Your donation ID is: {donation_id}\n\n"
            f"We appreciate your support!"
        )
        self._send(email_to, "Thank you for your donation!", body_text)

    def send_refund_confirmation(self, email_to: str, amount_cents: int, donation_id: str):
        body_text = (
            f"Hello,\n\n"
            f"Your donation of ${format_amount(amount_cents)} has been refunded.\n"
            f"Donation ID: {donation_id}\n\n"
            f"The amount will be returned to your original payment method."
        )
        self._send(email_to, "Your donation has been refunded", body_text)
