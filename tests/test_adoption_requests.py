import pytest

from pethub.core.errors import DuplicateRequest, Forbidden, InvalidTransition, NotFound
from conftest import ALICE, BOB


@pytest.fixture
def pet(pet_service, alice):
    return pet_service.create_pet(alice, name="Milo", category="cat")


class TestSubmitRequest:

    def test_duplicate_while_pending(self, adoption_service, pet, bob):
        adoption_service.submit_request(pet.pet_id, bob)
        with pytest.raises(DuplicateRequest):
            adoption_service.submit_request(pet.pet_id, bob)

    def test_resubmit_after_rejection(self, adoption_service, pet, bob, alice):
        request_id = adoption_service.submit_request(pet.pet_id, bob)
        adoption_service.resolve_request(request_id, "reject", alice)

        assert adoption_service.submit_request(pet.pet_id, bob) != request_id

    def test_marks_listing_requested(self, adoption_service, pet_service, pet, bob, carol):
        adoption_service.submit_request(pet.pet_id, bob)
        adoption_service.submit_request(pet.pet_id, carol)

        stored = pet_service.get_pet(pet.pet_id)
        assert stored.listing_status == "ADOPTION_REQUESTED"
        assert stored.pending_requests == 2
        assert stored.adopted is False

    def test_unknown_pet(self, adoption_service, bob):
        with pytest.raises(NotFound):
            adoption_service.submit_request("missing", bob)

    def test_owner_cannot_request_own_pet(self, adoption_service, pet, alice):
        with pytest.raises(Forbidden):
            adoption_service.submit_request(pet.pet_id, alice)

    def test_adopted_pet(self, adoption_service, pet_service, pet, alice, bob):
        pet_service.set_adopted(pet.pet_id, True, alice)
        with pytest.raises(InvalidTransition):
            adoption_service.submit_request(pet.pet_id, bob)


class TestResolveRequest:

    def test_accept_scenario(self, adoption_service, pet_service, pet, alice, bob):
        assert pet.adopted is False
        request_id = adoption_service.submit_request(pet.pet_id, bob)
        with pytest.raises(DuplicateRequest):
            adoption_service.submit_request(pet.pet_id, bob)

        adoption_service.resolve_request(request_id, "accept", alice)

        stored = pet_service.get_pet(pet.pet_id)
        assert stored.adopted is True
        assert stored.listing_status == "ADOPTED"
        assert stored.owner_email == BOB
        assert stored.creator_email == ALICE
        assert adoption_service.list_requests_for_owner(ALICE, alice) == []
        assert adoption_service.requests.get_request(request_id) is None

    def test_accepted_pet_moves_to_new_owner(self, adoption_service, pet_service, pet, alice, bob):
        request_id = adoption_service.submit_request(pet.pet_id, bob)
        adoption_service.resolve_request(request_id, "accept", alice)

        assert [p.pet_id for p in pet_service.list_pets_by_owner(BOB, bob)] == [pet.pet_id]
        assert pet_service.list_pets_by_owner(ALICE, alice) == []

    def test_reject_restores_listing(self, adoption_service, pet_service, pet, alice, bob):
        request_id = adoption_service.submit_request(pet.pet_id, bob)
        adoption_service.resolve_request(request_id, "reject", alice)

        stored = pet_service.get_pet(pet.pet_id)
        assert stored.listing_status == "LISTED"
        assert stored.pending_requests == 0
        assert stored.adopted is False

    def test_reject_keeps_other_requests_pending(self, adoption_service, pet_service, pet, alice, bob, carol):
        request_id = adoption_service.submit_request(pet.pet_id, bob)
        adoption_service.submit_request(pet.pet_id, carol)
        adoption_service.resolve_request(request_id, "reject", alice)

        stored = pet_service.get_pet(pet.pet_id)
        assert stored.listing_status == "ADOPTION_REQUESTED"
        assert stored.pending_requests == 1

    def test_second_accept_is_rejected(self, adoption_service, pet_service, pet, alice, bob, carol):
        first = adoption_service.submit_request(pet.pet_id, bob)
        second = adoption_service.submit_request(pet.pet_id, carol)
        adoption_service.resolve_request(first, "accept", alice)

        with pytest.raises(InvalidTransition):
            adoption_service.resolve_request(second, "accept", bob)
        assert pet_service.get_pet(pet.pet_id).owner_email == BOB

        adoption_service.resolve_request(second, "reject", bob)
        stored = pet_service.get_pet(pet.pet_id)
        assert stored.pending_requests == 0
        assert stored.listing_status == "ADOPTED"

    def test_former_owner_cannot_resolve_after_handover(self, adoption_service, pet_service, pet, alice, bob, carol):
        first = adoption_service.submit_request(pet.pet_id, bob)
        second = adoption_service.submit_request(pet.pet_id, carol)
        adoption_service.resolve_request(first, "accept", alice)
        pet_service.set_adopted(pet.pet_id, False, bob)

        with pytest.raises(Forbidden):
            adoption_service.resolve_request(second, "accept", alice)
        with pytest.raises(Forbidden):
            adoption_service.resolve_request(second, "reject", alice)

        stored = pet_service.get_pet(pet.pet_id)
        assert stored.owner_email == BOB
        assert stored.pending_requests == 1
        assert adoption_service.requests.get_request(second) is not None

    def test_owner_changed_after_authorization(self, adoption_service, pet_service, pet, alice, bob, carol):
        first = adoption_service.submit_request(pet.pet_id, bob)
        second = adoption_service.submit_request(pet.pet_id, carol)
        stale = adoption_service.requests.get_request(second)
        adoption_service.resolve_request(first, "accept", alice)
        pet_service.set_adopted(pet.pet_id, False, bob)

        with pytest.raises(Forbidden):
            adoption_service.requests.resolve_request(stale, "accept", expected_owner=ALICE)
        assert pet_service.get_pet(pet.pet_id).owner_email == BOB

    def test_new_owner_resolves_remaining_requests(self, adoption_service, pet_service, pet, alice, bob, carol):
        first = adoption_service.submit_request(pet.pet_id, bob)
        second = adoption_service.submit_request(pet.pet_id, carol)
        adoption_service.resolve_request(first, "accept", alice)
        pet_service.set_adopted(pet.pet_id, False, bob)

        adoption_service.resolve_request(second, "accept", bob)
        assert pet_service.get_pet(pet.pet_id).owner_email == carol.email

    def test_only_owner_resolves(self, adoption_service, pet, bob, carol):
        request_id = adoption_service.submit_request(pet.pet_id, bob)
        with pytest.raises(Forbidden):
            adoption_service.resolve_request(request_id, "accept", carol)

    def test_unknown_request(self, adoption_service, alice):
        with pytest.raises(NotFound):
            adoption_service.resolve_request("missing", "reject", alice)


class TestRequestLookup:

    def test_found_right_after_submit(self, adoption_service, pet, bob):
        request_id = adoption_service.submit_request(pet.pet_id, bob)

        request = adoption_service.requests.get_request(request_id)
        assert request.request_id == request_id
        assert request.requester_email == BOB

    def test_resolve_right_after_submit(self, adoption_service, pet_service, pet, alice, bob):
        request_id = adoption_service.submit_request(pet.pet_id, bob)
        adoption_service.resolve_request(request_id, "accept", alice)
        assert pet_service.get_pet(pet.pet_id).owner_email == BOB

    def test_pet_deletion_drops_lookup(self, adoption_service, pet_service, pet, alice, bob):
        request_id = adoption_service.submit_request(pet.pet_id, bob)
        pet_service.delete_pet(pet.pet_id, alice)

        assert adoption_service.requests.get_request(request_id) is None
        with pytest.raises(NotFound):
            adoption_service.resolve_request(request_id, "accept", alice)


class TestListRequests:

    def test_owner_sees_pending_requests(self, adoption_service, pet, alice, bob, carol):
        adoption_service.submit_request(pet.pet_id, bob, phone="555-0101")
        adoption_service.submit_request(pet.pet_id, carol)

        requests = adoption_service.list_requests_for_owner(ALICE, alice)
        assert {r.requester_email for r in requests} == {BOB, carol.email}
        assert all(r.pet_name == "Milo" for r in requests)

    def test_other_users_are_forbidden(self, adoption_service, pet, bob):
        with pytest.raises(Forbidden):
            adoption_service.list_requests_for_owner(ALICE, bob)

    def test_admin_may_list(self, adoption_service, pet, bob, admin):
        adoption_service.submit_request(pet.pet_id, bob)
        assert len(adoption_service.list_requests_for_owner(ALICE, admin)) == 1
