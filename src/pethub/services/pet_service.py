import logging
from typing import Any

from pethub.core.errors import NotFound
from pethub.data_access.pets import PetRepository
from pethub.models.page import Page, paginate
from pethub.models.pet import Pet
from pethub.models.user import Principal
from pethub.services.access_policy import AccessPolicy

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset({
    "name", "category", "age", "location", "image_url",
    "short_description", "long_description",
})


def matches_search(search: str, *fields: str | None) -> bool:
    needle = search.lower()
    return any(needle in field.lower() for field in fields if field)


class PetService:
    def __init__(self, pets: PetRepository, policy: AccessPolicy):
        self.pets = pets
        self.policy = policy

    def create_pet(self, principal: Principal, **attributes: Any) -> Pet:
        pet = Pet(owner_email=principal.email, creator_email=principal.email, **attributes)
        self.pets.create_pet(pet)
        logger.info(f"Pet {pet.pet_id} listed by {principal.email}")
        return pet

    def get_pet(self, pet_id: str) -> Pet:
        pet = self.pets.get_pet(pet_id)
        if pet is None:
            raise NotFound(f"Pet {pet_id} not found")
        return pet

    def list_all_pets(self, principal: Principal) -> list[Pet]:
        self.policy.enforce(principal, "pets:list_all")
        return self.pets.list_pets()

    def list_pets_by_owner(self, email: str, principal: Principal) -> list[Pet]:
        self.policy.enforce(principal, "pets:list_own", email)
        return self.pets.list_pets_by_owner(email)

    def list_available_pets(self, page: int = 0, limit: int = 3, search: str = "",
                            category: str = "") -> Page:
        pets = [
            pet for pet in self.pets.list_pets()
            if not pet.adopted
            and (not category or pet.category == category)
            and (not search or matches_search(search, pet.name, pet.category))
        ]
        return paginate(pets, page, limit)

    def update_pet(self, pet_id: str, fields: dict[str, Any], principal: Principal) -> Pet:
        pet = self.get_pet(pet_id)
        self.policy.enforce(principal, "pets:update", pet.owner_email)

        changes = {k: v for k, v in fields.items() if k in EDITABLE_FIELDS}
        if not changes:
            return pet
        updated = self.pets.update_pet(pet_id, changes)
        if updated is None:
            raise NotFound(f"Pet {pet_id} not found")
        return updated

    def set_adopted(self, pet_id: str, adopted: bool, principal: Principal) -> Pet:
        pet = self.get_pet(pet_id)
        self.policy.enforce(principal, "pets:update", pet.owner_email)
        updated = self.pets.set_adopted(pet_id, adopted)
        logger.info(f"Pet {pet_id} adopted flag set to {adopted} by {principal.email}")
        return updated

    def delete_pet(self, pet_id: str, principal: Principal) -> None:
        pet = self.get_pet(pet_id)
        self.policy.enforce(principal, "pets:delete", pet.creator_email)
        self.pets.delete_pet(pet_id)
