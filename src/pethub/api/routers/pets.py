from fastapi import APIRouter, Depends, Query

from pethub.api.auth import get_principal
from pethub.api.schemas import AdoptedUpdateRequest, PetCreateRequest, PetUpdateRequest, StatusResponse
from pethub.core.dependencies import get_pet_service
from pethub.models.page import Page
from pethub.models.pet import Pet
from pethub.models.user import Principal
from pethub.services.pet_service import PetService

router = APIRouter(tags=["pets"])

@router.post("/pets", response_model=Pet, status_code=201)
def create_pet(
    body: PetCreateRequest,
    principal: Principal = Depends(get_principal),
    pets: PetService = Depends(get_pet_service)
):
    return pets.create_pet(principal, **body.model_dump())

@router.get("/pets", response_model=list[Pet])
def list_all_pets(
    principal: Principal = Depends(get_principal),
    pets: PetService = Depends(get_pet_service)
):
    return pets.list_all_pets(principal)

@router.get("/available-pets", response_model=Page[Pet])
def list_available_pets(
    search: str = "",
    category: str = "",
    page: int = Query(0, ge=0),
    limit: int = Query(3, ge=1, le=50),
    pets: PetService = Depends(get_pet_service)
):
    return pets.list_available_pets(page=page, limit=limit, search=search, category=category)

@router.get("/pets/{email}", response_model=list[Pet])
def list_pets_by_owner(
    email: str,
    principal: Principal = Depends(get_principal),
    pets: PetService = Depends(get_pet_service)
):
    return pets.list_pets_by_owner(email, principal)

@router.get("/pet/{pet_id}", response_model=Pet)
def get_pet(pet_id: str, pets: PetService = Depends(get_pet_service)):
    return pets.get_pet(pet_id)

@router.put("/pet/{pet_id}", response_model=Pet)
def update_pet(
    pet_id: str,
    body: PetUpdateRequest,
    principal: Principal = Depends(get_principal),
    pets: PetService = Depends(get_pet_service)
):
    return pets.update_pet(pet_id, body.model_dump(exclude_unset=True), principal)

@router.patch("/pet/{pet_id}", response_model=Pet)
def set_adopted(
    pet_id: str,
    body: AdoptedUpdateRequest,
    principal: Principal = Depends(get_principal),
    pets: PetService = Depends(get_pet_service)
):
    return pets.set_adopted(pet_id, body.adopted, principal)

@router.delete("/pet/{pet_id}", response_model=StatusResponse)
def delete_pet(
    pet_id: str,
    principal: Principal = Depends(get_principal),
    pets: PetService = Depends(get_pet_service)
):
    pets.delete_pet(pet_id, principal)
    return StatusResponse()
