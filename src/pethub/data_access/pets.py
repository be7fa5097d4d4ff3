import logging
from typing import Any

from boto3.dynamodb.conditions import Key
from botocore.exceptions import ClientError
from tenacity import retry, retry_if_exception_type, stop_after_attempt

from pethub.core.errors import InconsistentState, NotFound
from pethub.data_access.dynamodb import DynamoDataAccess, error_code, plain, sort_key
from pethub.models.pet import Pet, listing_status_for

logger = logging.getLogger(__name__)

PET_PREFIX = "PET#"
PET_SK = "PET"
PET_ENTITY = "PET"
OWNER_PREFIX = "OWNER#"
REQUEST_PREFIX = "REQUEST#"
REQUEST_POINTER_SK = "POINTER"


class StalePetRead(InconsistentState):
    """The pet changed between the read and the conditional write."""


def pet_key(pet_id: str) -> dict:
    return {"PK": f"{PET_PREFIX}{pet_id}", "SK": PET_SK}


class PetRepository(DynamoDataAccess):

    def create_pet(self, pet: Pet) -> Pet:
        item = {
            **pet_key(pet.pet_id),
            "GSI1PK": PET_ENTITY,
            "GSI1SK": sort_key(pet.created_at, pet.pet_id),
            "GSI2PK": f"{OWNER_PREFIX}{pet.owner_email}",
            "GSI2SK": sort_key(pet.created_at, pet.pet_id),
            **pet.model_dump(mode="json"),
        }
        self.table.put_item(Item=item, ConditionExpression="attribute_not_exists(PK)")
        return pet

    def get_pet(self, pet_id: str) -> Pet | None:
        item = self._get(f"{PET_PREFIX}{pet_id}", PET_SK)
        return Pet.model_validate(item) if item else None

    def list_pets(self) -> list[Pet]:
        return [Pet.model_validate(item) for item in self._query_entities(PET_ENTITY)]

    def list_pets_by_owner(self, email: str) -> list[Pet]:
        return [
            Pet.model_validate(item)
            for item in self._query_owned(f"{OWNER_PREFIX}{email}")
        ]

    def update_pet(self, pet_id: str, fields: dict[str, Any]) -> Pet | None:
        item = self._update_fields(f"{PET_PREFIX}{pet_id}", PET_SK, fields)
        return Pet.model_validate(item) if item else None

    @retry(
        stop=stop_after_attempt(3),
        retry=retry_if_exception_type(StalePetRead),
        reraise=True,
    )
    def set_adopted(self, pet_id: str, adopted: bool) -> Pet:
        pet = self.get_pet(pet_id)
        if pet is None:
            raise NotFound(f"Pet {pet_id} not found")

        try:
            response = self.table.update_item(
                Key=pet_key(pet_id),
                UpdateExpression="SET #adopted = :adopted, #status = :status",
                ConditionExpression="attribute_exists(PK) AND #pending = :seen",
                ExpressionAttributeNames={
                    "#adopted": "adopted",
                    "#status": "listing_status",
                    "#pending": "pending_requests",
                },
                ExpressionAttributeValues={
                    ":adopted": adopted,
                    ":status": listing_status_for(adopted, pet.pending_requests),
                    ":seen": pet.pending_requests,
                },
                ReturnValues="ALL_NEW",
            )
        except ClientError as e:
            if error_code(e) == 'ConditionalCheckFailedException':
                raise StalePetRead(
                    f"Pet {pet_id} changed while updating its adopted flag",
                    details={"pet_id": pet_id},
                )
            raise
        return Pet.model_validate(plain(response.get("Attributes", {})))

    def delete_pet(self, pet_id: str) -> int:
        """Deletes the pet together with its pending adoption requests."""
        items = self._query_all(
            KeyConditionExpression=Key("PK").eq(f"{PET_PREFIX}{pet_id}"),
            ConsistentRead=True,
        )
        if not any(item["SK"] == PET_SK for item in items):
            raise NotFound(f"Pet {pet_id} not found")

        with self.table.batch_writer() as batch:
            for item in items:
                batch.delete_item(Key={"PK": item["PK"], "SK": item["SK"]})
                if item["SK"].startswith(REQUEST_PREFIX):
                    batch.delete_item(Key={
                        "PK": f"{REQUEST_PREFIX}{item['request_id']}",
                        "SK": REQUEST_POINTER_SK,
                    })
        logger.info(f"Deleted pet {pet_id} and {len(items) - 1} pending requests.")
        return len(items) - 1
