import logging
from datetime import datetime
from decimal import Decimal
from typing import Any

from boto3.dynamodb.conditions import Key
from botocore.exceptions import ClientError
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential

logger = logging.getLogger(__name__)

ENTITY_INDEX = "EntityIndex"
OWNER_INDEX = "OwnerIndex"

CONDITION_FAILED = "ConditionalCheckFailed"
TRANSACTION_CONFLICT = "TransactionConflict"


def sort_key(created_at: datetime, entity_id: str) -> str:
    # Fixed-width timestamp so string order equals time order; the id breaks ties.
    return f"{created_at.strftime('%Y-%m-%dT%H:%M:%S.%f')}#{entity_id}"


def plain(value: Any) -> Any:
    """Converts the Decimals returned by the resource API back to ints."""
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, dict):
        return {k: plain(v) for k, v in value.items()}
    if isinstance(value, list):
        return [plain(v) for v in value]
    return value


def error_code(error: ClientError) -> str:
    return error.response.get("Error", {}).get("Code", "")


def cancellation_codes(error: ClientError) -> list[str]:
    reasons = error.response.get("CancellationReasons", [])
    return [reason.get("Code", "None") for reason in reasons]


def is_transaction_conflict(error: BaseException) -> bool:
    return (
        isinstance(error, ClientError)
        and error_code(error) == "TransactionCanceledException"
        and TRANSACTION_CONFLICT in cancellation_codes(error)
    )


retry_on_conflict = retry(
    wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
    stop=stop_after_attempt(3),
    retry=retry_if_exception(is_transaction_conflict),
    reraise=True,
)


def update_expression(fields: dict[str, Any]) -> tuple[str, dict, dict]:
    names = {}
    values = {}
    assignments = []
    for i, (field, value) in enumerate(fields.items()):
        names[f"#f{i}"] = field
        values[f":v{i}"] = value
        assignments.append(f"#f{i} = :v{i}")
    return "SET " + ", ".join(assignments), names, values


class DynamoDataAccess:
    """
    Shared plumbing for the repositories. Every repository works against the
    same single table, handed in at construction.
    """

    def __init__(self, table):
        self.table = table

    @property
    def client(self):
        # The resource's client serializes plain Python values, like the table does.
        return self.table.meta.client

    def _get(self, pk: str, sk: str) -> dict | None:
        response = self.table.get_item(Key={"PK": pk, "SK": sk}, ConsistentRead=True)
        item = response.get("Item")
        return plain(item) if item else None

    def _query_all(self, **kwargs) -> list[dict]:
        items = []
        while True:
            response = self.table.query(**kwargs)
            items.extend(response.get("Items", []))
            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                return [plain(item) for item in items]
            kwargs["ExclusiveStartKey"] = last_key

    def _query_entities(self, entity: str) -> list[dict]:
        """All items of one entity type, newest first."""
        return self._query_all(
            IndexName=ENTITY_INDEX,
            KeyConditionExpression=Key("GSI1PK").eq(entity),
            ScanIndexForward=False,
        )

    def _query_owned(self, owner_pk: str) -> list[dict]:
        return self._query_all(
            IndexName=OWNER_INDEX,
            KeyConditionExpression=Key("GSI2PK").eq(owner_pk),
            ScanIndexForward=False,
        )

    def _update_fields(self, pk: str, sk: str, fields: dict[str, Any]) -> dict | None:
        expression, names, values = update_expression(fields)
        try:
            response = self.table.update_item(
                Key={"PK": pk, "SK": sk},
                UpdateExpression=expression,
                ConditionExpression="attribute_exists(PK)",
                ExpressionAttributeNames=names,
                ExpressionAttributeValues=values,
                ReturnValues="ALL_NEW",
            )
            return plain(response.get("Attributes", {}))
        except ClientError as e:
            if error_code(e) == "ConditionalCheckFailedException":
                return None
            logger.error(f"Error updating {pk}: {e}")
            raise

    def _transact(self, items: list[dict]) -> None:
        for item in items:
            for operation in item.values():
                operation.setdefault("TableName", self.table.name)
        self.client.transact_write_items(TransactItems=items)
