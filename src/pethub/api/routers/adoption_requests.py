from fastapi import APIRouter, Depends

from pethub.api.auth import get_principal
from pethub.api.schemas import AdoptionRequestCreate, CreatedResponse, StatusResponse
from pethub.core.dependencies import get_adoption_service
from pethub.models.adoption import AdoptionRequest, Decision
from pethub.models.user import Principal
from pethub.services.adoption_service import AdoptionService

router = APIRouter(prefix="/adoption-requests", tags=["adoption-requests"])

@router.post("", response_model=CreatedResponse, status_code=201)
def submit_request(
    body: AdoptionRequestCreate,
    principal: Principal = Depends(get_principal),
    adoptions: AdoptionService = Depends(get_adoption_service)
):
    request_id = adoptions.submit_request(
        pet_id=body.pet_id,
        principal=principal,
        requester_name=body.requester_name,
        phone=body.phone,
        address=body.address
    )
    return CreatedResponse(id=request_id)

@router.get("/{owner_email}", response_model=list[AdoptionRequest])
def list_requests_for_owner(
    owner_email: str,
    principal: Principal = Depends(get_principal),
    adoptions: AdoptionService = Depends(get_adoption_service)
):
    return adoptions.list_requests_for_owner(owner_email, principal)

@router.delete("/{request_id}", response_model=StatusResponse)
def resolve_request(
    request_id: str,
    decision: Decision,
    principal: Principal = Depends(get_principal),
    adoptions: AdoptionService = Depends(get_adoption_service)
):
    adoptions.resolve_request(request_id, decision, principal)
    return StatusResponse()
