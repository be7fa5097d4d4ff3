import logging
from typing import Any

from botocore.exceptions import ClientError
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential

from pethub.core.errors import InconsistentState, InvalidTransition, NotFound
from pethub.data_access.dynamodb import (
    CONDITION_FAILED,
    DynamoDataAccess,
    cancellation_codes,
    error_code,
    is_transaction_conflict,
    retry_on_conflict,
    sort_key,
)
from pethub.models.campaign import Campaign
from pethub.models.donation import DonationRecord

logger = logging.getLogger(__name__)

CAMPAIGN_PREFIX = "CAMPAIGN#"
CAMPAIGN_SK = "CAMPAIGN"
CAMPAIGN_ENTITY = "CAMPAIGN"
CREATOR_PREFIX = "CREATOR#"
DONATION_PREFIX = "DONATION#"
DONATION_SK = "RECORD"
DONOR_PREFIX = "DONOR#"
TXN_PREFIX = "TXN#"
GUARD_SK = "GUARD"


class StaleDonatorIndex(InconsistentState):
    """The donators list shifted between reading it and removing an entry."""


def _refund_should_retry(error: BaseException) -> bool:
    return isinstance(error, StaleDonatorIndex) or is_transaction_conflict(error)


def campaign_key(campaign_id: str) -> dict:
    return {"PK": f"{CAMPAIGN_PREFIX}{campaign_id}", "SK": CAMPAIGN_SK}


def donation_key(donation_id: str) -> dict:
    return {"PK": f"{DONATION_PREFIX}{donation_id}", "SK": DONATION_SK}


class CampaignRepository(DynamoDataAccess):
    """
    Campaigns and their donation audit records. The campaign document owns
    the donators list and the running total; both change only inside the
    same transaction that writes or flags the matching DonationRecord.
    """

    def create_campaign(self, campaign: Campaign) -> Campaign:
        item = {
            **campaign_key(campaign.campaign_id),
            "GSI1PK": CAMPAIGN_ENTITY,
            "GSI1SK": sort_key(campaign.created_at, campaign.campaign_id),
            "GSI2PK": f"{CREATOR_PREFIX}{campaign.creator_email}",
            "GSI2SK": sort_key(campaign.created_at, campaign.campaign_id),
            **campaign.model_dump(mode="json"),
        }
        self.table.put_item(Item=item, ConditionExpression="attribute_not_exists(PK)")
        return campaign

    def get_campaign(self, campaign_id: str) -> Campaign | None:
        item = self._get(f"{CAMPAIGN_PREFIX}{campaign_id}", CAMPAIGN_SK)
        return Campaign.model_validate(item) if item else None

    def list_campaigns(self) -> list[Campaign]:
        return [Campaign.model_validate(item) for item in self._query_entities(CAMPAIGN_ENTITY)]

    def list_campaigns_by_creator(self, email: str) -> list[Campaign]:
        return [
            Campaign.model_validate(item)
            for item in self._query_owned(f"{CREATOR_PREFIX}{email}")
        ]

    def update_campaign(self, campaign_id: str, fields: dict[str, Any]) -> Campaign | None:
        item = self._update_fields(f"{CAMPAIGN_PREFIX}{campaign_id}", CAMPAIGN_SK, fields)
        return Campaign.model_validate(item) if item else None

    def delete_campaign(self, campaign_id: str) -> bool:
        try:
            self.table.delete_item(
                Key=campaign_key(campaign_id),
                ConditionExpression="attribute_exists(PK)",
            )
            return True
        except ClientError as e:
            if error_code(e) == 'ConditionalCheckFailedException':
                return False
            logger.error(f"Error deleting campaign {campaign_id}: {e}")
            raise

    def get_donation(self, donation_id: str) -> DonationRecord | None:
        item = self._get(f"{DONATION_PREFIX}{donation_id}", DONATION_SK)
        return DonationRecord.model_validate(item) if item else None

    def get_donation_by_transaction(self, transaction_id: str) -> DonationRecord | None:
        guard = self._get(f"{TXN_PREFIX}{transaction_id}", GUARD_SK)
        return self.get_donation(guard["donation_id"]) if guard else None

    def list_donations_by_donor(self, email: str) -> list[DonationRecord]:
        return [
            DonationRecord.model_validate(item)
            for item in self._query_owned(f"{DONOR_PREFIX}{email}")
        ]

    @retry_on_conflict
    def record_donation(self, record: DonationRecord) -> tuple[DonationRecord, bool]:
        """
        Appends the donator to the campaign, bumps its total and stores the
        audit record, all or nothing. Returns the stored record and whether
        this call created it; a transaction id seen before yields the
        original record.
        """
        donator = record.donator
        record_item = {
            **donation_key(record.donation_id),
            "GSI2PK": f"{DONOR_PREFIX}{donator.email}",
            "GSI2SK": sort_key(record.created_at, record.donation_id),
            **record.model_dump(mode="json"),
        }
        guard_item = {
            "PK": f"{TXN_PREFIX}{donator.transaction_id}",
            "SK": GUARD_SK,
            "donation_id": record.donation_id,
            "campaign_id": record.campaign_id,
        }

        try:
            self._transact([
                {
                    "Update": {
                        "Key": campaign_key(record.campaign_id),
                        "UpdateExpression": (
                            "SET #donators = list_append(#donators, :donator) "
                            "ADD #donated :amount"
                        ),
                        "ConditionExpression": "attribute_exists(PK) AND #paused = :false",
                        "ExpressionAttributeNames": {
                            "#donators": "donators",
                            "#donated": "donated_amount",
                            "#paused": "pause_status",
                        },
                        "ExpressionAttributeValues": {
                            ":donator": [donator.model_dump(mode="json")],
                            ":amount": donator.donate_amount,
                            ":false": False,
                        },
                    }
                },
                {"Put": {"Item": record_item, "ConditionExpression": "attribute_not_exists(PK)"}},
                {"Put": {"Item": guard_item, "ConditionExpression": "attribute_not_exists(PK)"}},
            ])
        except ClientError as e:
            if error_code(e) != "TransactionCanceledException":
                logger.error(f"Error recording donation {record.donation_id}: {e}")
                raise
            codes = cancellation_codes(e)
            if len(codes) > 2 and codes[2] == CONDITION_FAILED:
                existing = self.get_donation_by_transaction(donator.transaction_id)
                if existing is not None:
                    logger.info(
                        f"Idempotency check: transaction {donator.transaction_id} already recorded."
                    )
                    return existing, False
            if codes and codes[0] == CONDITION_FAILED:
                campaign = self.get_campaign(record.campaign_id)
                if campaign is None:
                    raise NotFound(f"Campaign {record.campaign_id} not found")
                raise InvalidTransition(f"Campaign {record.campaign_id} is paused")
            raise

        return record, True

    @retry(
        wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
        stop=stop_after_attempt(3),
        retry=retry_if_exception(_refund_should_retry),
        reraise=True,
    )
    def refund_donation(self, donation_id: str, campaign_id: str) -> DonationRecord:
        """
        Removes the donator entry, subtracts its exact amount and flags the
        record as refunded, in one transaction. The entry is located by
        transaction id; if the list shifted meanwhile the read is repeated.
        """
        record = self.get_donation(donation_id)
        if record is None or record.campaign_id != campaign_id:
            raise NotFound(f"Donation {donation_id} not found for campaign {campaign_id}")
        if record.refund:
            raise InvalidTransition(f"Donation {donation_id} has already been refunded")

        campaign = self.get_campaign(campaign_id)
        if campaign is None:
            raise NotFound(f"Campaign {campaign_id} not found")

        transaction_id = record.donator.transaction_id
        index = campaign.donator_index(transaction_id)
        if index is None:
            raise InconsistentState(
                f"Donation {donation_id} has no donator entry in campaign {campaign_id}",
                details={
                    "donation_id": donation_id,
                    "campaign_id": campaign_id,
                    "transaction_id": transaction_id,
                },
            )
        amount = campaign.donators[index].donate_amount

        try:
            self._transact([
                {
                    "Update": {
                        "Key": campaign_key(campaign_id),
                        "UpdateExpression": f"REMOVE #donators[{index}] ADD #donated :refund",
                        "ConditionExpression": f"#donators[{index}].#txn = :txn",
                        "ExpressionAttributeNames": {
                            "#donators": "donators",
                            "#donated": "donated_amount",
                            "#txn": "transaction_id",
                        },
                        "ExpressionAttributeValues": {
                            ":refund": -amount,
                            ":txn": transaction_id,
                        },
                    }
                },
                {
                    "Update": {
                        "Key": donation_key(donation_id),
                        "UpdateExpression": "SET #refund = :true",
                        "ConditionExpression": "attribute_exists(PK) AND #refund = :false",
                        "ExpressionAttributeNames": {"#refund": "refund"},
                        "ExpressionAttributeValues": {":true": True, ":false": False},
                    }
                },
            ])
        except ClientError as e:
            if error_code(e) != "TransactionCanceledException":
                logger.error(f"Error refunding donation {donation_id}: {e}")
                raise
            codes = cancellation_codes(e)
            if len(codes) > 1 and codes[1] == CONDITION_FAILED:
                raise InvalidTransition(f"Donation {donation_id} has already been refunded")
            if codes and codes[0] == CONDITION_FAILED:
                raise StaleDonatorIndex(
                    f"Donator entry for {transaction_id} moved in campaign {campaign_id}",
                    details={
                        "donation_id": donation_id,
                        "campaign_id": campaign_id,
                        "transaction_id": transaction_id,
                    },
                )
            raise

        return record.model_copy(update={"refund": True})
