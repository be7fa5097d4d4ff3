import logging

from botocore.exceptions import ClientError

from pethub.core.errors import DuplicateRequest, Forbidden, InvalidTransition, NotFound
from pethub.data_access.dynamodb import (
    CONDITION_FAILED,
    DynamoDataAccess,
    cancellation_codes,
    error_code,
    retry_on_conflict,
    sort_key,
)
from pethub.data_access.pets import (
    OWNER_PREFIX,
    PET_PREFIX,
    REQUEST_POINTER_SK,
    REQUEST_PREFIX,
    PetRepository,
    pet_key,
)
from pethub.models.adoption import AdoptionRequest, Decision

logger = logging.getLogger(__name__)

REQUESTS_FOR_PREFIX = "REQUESTS_FOR#"


class AdoptionRequestRepository(DynamoDataAccess):
    """
    Pending adoption requests. A request lives in its pet's partition under
    a key derived from the requester's email, so the insert condition alone
    rejects a second pending request for the same (pet, requester) pair.
    A pointer item keyed by request id is written and removed in the same
    transactions, so lookups by id are strongly consistent reads.
    """

    def __init__(self, table, pets: PetRepository):
        super().__init__(table)
        self.pets = pets

    def _request_key(self, pet_id: str, requester_email: str) -> dict:
        return {"PK": f"{PET_PREFIX}{pet_id}", "SK": f"{REQUEST_PREFIX}{requester_email}"}

    def _pointer_key(self, request_id: str) -> dict:
        return {"PK": f"{REQUEST_PREFIX}{request_id}", "SK": REQUEST_POINTER_SK}

    @retry_on_conflict
    def submit_request(self, request: AdoptionRequest) -> AdoptionRequest:
        item = {
            **self._request_key(request.pet_id, request.requester_email),
            "GSI2PK": f"{REQUESTS_FOR_PREFIX}{request.present_owner_email}",
            "GSI2SK": sort_key(request.created_at, request.request_id),
            **request.model_dump(mode="json"),
        }
        pointer = {
            **self._pointer_key(request.request_id),
            "pet_id": request.pet_id,
            "requester_email": request.requester_email,
        }
        try:
            self._transact([
                {
                    "Put": {
                        "Item": item,
                        "ConditionExpression": "attribute_not_exists(PK)",
                    }
                },
                {
                    "Update": {
                        "Key": pet_key(request.pet_id),
                        "UpdateExpression": "SET #status = :requested ADD #pending :one",
                        "ConditionExpression": "attribute_exists(PK) AND #adopted = :false",
                        "ExpressionAttributeNames": {
                            "#status": "listing_status",
                            "#pending": "pending_requests",
                            "#adopted": "adopted",
                        },
                        "ExpressionAttributeValues": {
                            ":requested": "ADOPTION_REQUESTED",
                            ":one": 1,
                            ":false": False,
                        },
                    }
                },
                {
                    "Put": {
                        "Item": pointer,
                        "ConditionExpression": "attribute_not_exists(PK)",
                    }
                },
            ])
        except ClientError as e:
            if error_code(e) != "TransactionCanceledException":
                raise
            codes = cancellation_codes(e)
            if codes and codes[0] == CONDITION_FAILED:
                raise DuplicateRequest(
                    f"{request.requester_email} already has a pending request for pet {request.pet_id}"
                )
            if len(codes) > 1 and codes[1] == CONDITION_FAILED:
                self._raise_for_pet(request.pet_id)
            raise

        logger.info(f"Adoption request {request.request_id} submitted for pet {request.pet_id}.")
        return request

    def get_request(self, request_id: str) -> AdoptionRequest | None:
        pointer = self._get(f"{REQUEST_PREFIX}{request_id}", REQUEST_POINTER_SK)
        if pointer is None:
            return None
        item = self._get(f"{PET_PREFIX}{pointer['pet_id']}", f"{REQUEST_PREFIX}{pointer['requester_email']}")
        return AdoptionRequest.model_validate(item) if item else None

    def list_requests_for_owner(self, owner_email: str) -> list[AdoptionRequest]:
        return [
            AdoptionRequest.model_validate(item)
            for item in self._query_owned(f"{REQUESTS_FOR_PREFIX}{owner_email}")
        ]

    @retry_on_conflict
    def resolve_request(self, request: AdoptionRequest, decision: Decision, expected_owner: str) -> None:
        """
        Removes the request and applies the decision to the pet in one
        transaction. The pet must still belong to `expected_owner`, the
        owner the caller was authorized against.
        """
        names = {"#owner": "owner_email", "#pending": "pending_requests"}
        values = {":expected_owner": expected_owner, ":minus_one": -1}

        if decision == "accept":
            expression = (
                "SET #adopted = :true, #status = :adopted_status, "
                "#owner = :requester, #owner_pk = :owner_pk ADD #pending :minus_one"
            )
            condition = "attribute_exists(PK) AND #owner = :expected_owner AND #adopted = :false"
            names.update({"#adopted": "adopted", "#status": "listing_status", "#owner_pk": "GSI2PK"})
            values.update({
                ":true": True,
                ":false": False,
                ":adopted_status": "ADOPTED",
                ":requester": request.requester_email,
                ":owner_pk": f"{OWNER_PREFIX}{request.requester_email}",
            })
        else:
            expression = "ADD #pending :minus_one"
            condition = "attribute_exists(PK) AND #owner = :expected_owner"

        try:
            self._transact([
                {
                    "Delete": {
                        "Key": self._request_key(request.pet_id, request.requester_email),
                        "ConditionExpression": "attribute_exists(PK)",
                    }
                },
                {
                    "Update": {
                        "Key": pet_key(request.pet_id),
                        "UpdateExpression": expression,
                        "ConditionExpression": condition,
                        "ExpressionAttributeNames": names,
                        "ExpressionAttributeValues": values,
                    }
                },
                {"Delete": {"Key": self._pointer_key(request.request_id)}},
            ])
        except ClientError as e:
            if error_code(e) != "TransactionCanceledException":
                raise
            codes = cancellation_codes(e)
            if codes and codes[0] == CONDITION_FAILED:
                raise NotFound(f"Adoption request {request.request_id} not found")
            if len(codes) > 1 and codes[1] == CONDITION_FAILED:
                self._raise_for_pet(request.pet_id, expected_owner)
            raise

        if decision == "reject":
            self._restore_listed(request.pet_id)

        logger.info(
            f"Adoption request {request.request_id} for pet {request.pet_id} resolved: {decision}."
        )

    def _restore_listed(self, pet_id: str) -> None:
        # Only flips back when nothing is pending; a concurrent submit keeps its status.
        try:
            self.table.update_item(
                Key=pet_key(pet_id),
                UpdateExpression="SET #status = :listed",
                ConditionExpression="#pending = :zero AND #adopted = :false",
                ExpressionAttributeNames={
                    "#status": "listing_status",
                    "#pending": "pending_requests",
                    "#adopted": "adopted",
                },
                ExpressionAttributeValues={":listed": "LISTED", ":zero": 0, ":false": False},
            )
        except ClientError as e:
            if error_code(e) != 'ConditionalCheckFailedException':
                raise
            logger.debug(f"Pet {pet_id} keeps its listing status.")

    def _raise_for_pet(self, pet_id: str, expected_owner: str | None = None) -> None:
        pet = self.pets.get_pet(pet_id)
        if pet is None:
            raise NotFound(f"Pet {pet_id} not found")
        if expected_owner is not None and pet.owner_email != expected_owner:
            raise Forbidden("forbidden access")
        raise InvalidTransition(f"Pet {pet_id} has already been adopted")
