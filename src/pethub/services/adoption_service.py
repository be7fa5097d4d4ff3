import logging

from pethub.core.errors import Forbidden, InvalidTransition, NotFound
from pethub.data_access.adoption_requests import AdoptionRequestRepository
from pethub.data_access.pets import PetRepository
from pethub.models.adoption import AdoptionRequest, Decision
from pethub.models.user import Principal
from pethub.services.access_policy import AccessPolicy

logger = logging.getLogger(__name__)

class AdoptionService:
    def __init__(self, requests: AdoptionRequestRepository, pets: PetRepository, policy: AccessPolicy):
        self.requests = requests
        self.pets = pets
        self.policy = policy

    def submit_request(self, pet_id: str, principal: Principal, requester_name: str | None = None,
                       phone: str | None = None, address: str | None = None) -> str:
        pet = self.pets.get_pet(pet_id)
        if pet is None:
            raise NotFound(f"Pet {pet_id} not found")
        if pet.adopted:
            raise InvalidTransition(f"Pet {pet_id} has already been adopted")
        if pet.owner_email == principal.email:
            raise Forbidden("You cannot request to adopt your own pet")

        request = AdoptionRequest(
            pet_id=pet_id,
            pet_name=pet.name,
            requester_email=principal.email,
            requester_name=requester_name or principal.name,
            phone=phone,
            address=address,
            present_owner_email=pet.owner_email,
        )
        return self.requests.submit_request(request).request_id

    def list_requests_for_owner(self, owner_email: str, principal: Principal) -> list[AdoptionRequest]:
        self.policy.enforce(principal, "adoption_requests:list", owner_email)
        return self.requests.list_requests_for_owner(owner_email)

    def resolve_request(self, request_id: str, decision: Decision, principal: Principal) -> None:
        request = self.requests.get_request(request_id)
        if request is None:
            raise NotFound(f"Adoption request {request_id} not found")
        pet = self.pets.get_pet(request.pet_id)
        if pet is None:
            raise NotFound(f"Pet {request.pet_id} not found")
        # The pet may have changed hands since the request was filed.
        self.policy.enforce(principal, "adoption_requests:resolve", pet.owner_email)
        self.requests.resolve_request(request, decision, expected_owner=pet.owner_email)
