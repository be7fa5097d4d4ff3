import pytest

from pethub.core.errors import Forbidden, NotFound
from conftest import ALICE


@pytest.fixture
def pet(pet_service, alice):
    return pet_service.create_pet(alice, name="Milo", category="cat", age=2)


class TestPetListing:

    def test_create_and_read(self, pet_service, pet):
        stored = pet_service.get_pet(pet.pet_id)
        assert stored.name == "Milo"
        assert stored.age == 2
        assert stored.adopted is False
        assert stored.listing_status == "LISTED"
        assert stored.owner_email == ALICE
        assert stored.creator_email == ALICE

    def test_unknown_pet(self, pet_service):
        with pytest.raises(NotFound):
            pet_service.get_pet("missing")

    def test_update_by_owner(self, pet_service, pet, alice):
        updated = pet_service.update_pet(pet.pet_id, {"location": "Dhaka", "adopted": True}, alice)
        assert updated.location == "Dhaka"
        # adopted only changes through set_adopted
        assert updated.adopted is False

    def test_update_by_stranger(self, pet_service, pet, bob):
        with pytest.raises(Forbidden):
            pet_service.update_pet(pet.pet_id, {"location": "Dhaka"}, bob)


class TestAdoptedFlag:

    def test_flag_can_be_reverted(self, pet_service, pet, alice):
        assert pet_service.set_adopted(pet.pet_id, True, alice).listing_status == "ADOPTED"

        reverted = pet_service.set_adopted(pet.pet_id, False, alice)
        assert reverted.adopted is False
        assert reverted.listing_status == "LISTED"

    def test_revert_keeps_pending_requests_visible(self, pet_service, adoption_service, pet, alice, bob):
        adoption_service.submit_request(pet.pet_id, bob)
        pet_service.set_adopted(pet.pet_id, True, alice)

        reverted = pet_service.set_adopted(pet.pet_id, False, alice)
        assert reverted.listing_status == "ADOPTION_REQUESTED"

    def test_stranger_cannot_flip(self, pet_service, pet, bob):
        with pytest.raises(Forbidden):
            pet_service.set_adopted(pet.pet_id, True, bob)


class TestDeletePet:

    def test_delete_removes_pending_requests(self, pet_service, adoption_service, pet, alice, bob):
        request_id = adoption_service.submit_request(pet.pet_id, bob)
        pet_service.delete_pet(pet.pet_id, alice)

        with pytest.raises(NotFound):
            pet_service.get_pet(pet.pet_id)
        assert adoption_service.requests.get_request(request_id) is None

    def test_only_creator_or_admin(self, pet_service, pet, bob, admin):
        with pytest.raises(Forbidden):
            pet_service.delete_pet(pet.pet_id, bob)
        pet_service.delete_pet(pet.pet_id, admin)


class TestOwnerViews:

    def test_own_pets(self, pet_service, pet, alice):
        assert [p.pet_id for p in pet_service.list_pets_by_owner(ALICE, alice)] == [pet.pet_id]

    def test_other_users_pets_are_forbidden(self, pet_service, pet, bob):
        with pytest.raises(Forbidden):
            pet_service.list_pets_by_owner(ALICE, bob)

    def test_list_all_is_admin_only(self, pet_service, pet, bob, admin):
        with pytest.raises(Forbidden):
            pet_service.list_all_pets(bob)
        assert len(pet_service.list_all_pets(admin)) == 1
