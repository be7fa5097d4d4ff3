from fastapi import APIRouter, Depends, Query
from typing import Optional

from pethub.api.auth import get_principal
from pethub.api.schemas import CampaignCreateRequest, CampaignUpdateRequest, PauseRequest, StatusResponse
from pethub.core.dependencies import get_campaign_service
from pethub.models.campaign import Campaign
from pethub.models.page import Page
from pethub.models.user import Principal
from pethub.services.campaign_service import CampaignService

router = APIRouter(tags=["campaigns"])

@router.post("/campaigns", response_model=Campaign, status_code=201)
def create_campaign(
    body: CampaignCreateRequest,
    principal: Principal = Depends(get_principal),
    campaigns: CampaignService = Depends(get_campaign_service)
):
    meta = body.model_dump(exclude={"target"})
    return campaigns.create_campaign(principal, target=body.target, **meta)

@router.get("/campaigns", response_model=Page[Campaign])
def list_campaigns(
    search: str = "",
    category: str = "",
    exclude_id: Optional[str] = None,
    page: int = Query(0, ge=0),
    limit: int = Query(6, ge=1, le=50),
    campaigns: CampaignService = Depends(get_campaign_service)
):
    return campaigns.list_campaigns(
        page=page, limit=limit, search=search, category=category, exclude_id=exclude_id
    )

@router.get("/campaigns/creator/{email}", response_model=list[Campaign])
def list_campaigns_by_creator(
    email: str,
    principal: Principal = Depends(get_principal),
    campaigns: CampaignService = Depends(get_campaign_service)
):
    return campaigns.list_campaigns_by_creator(email, principal)

@router.get("/campaign/{campaign_id}", response_model=Campaign)
def get_campaign(campaign_id: str, campaigns: CampaignService = Depends(get_campaign_service)):
    return campaigns.get_campaign(campaign_id)

@router.put("/campaign/{campaign_id}", response_model=Campaign)
def update_campaign(
    campaign_id: str,
    body: CampaignUpdateRequest,
    principal: Principal = Depends(get_principal),
    campaigns: CampaignService = Depends(get_campaign_service)
):
    return campaigns.update_campaign(campaign_id, body.model_dump(exclude_unset=True), principal)

@router.patch("/campaign/{campaign_id}/status", response_model=Campaign)
def pause_campaign(
    campaign_id: str,
    body: PauseRequest,
    principal: Principal = Depends(get_principal),
    campaigns: CampaignService = Depends(get_campaign_service)
):
    return campaigns.pause_campaign(campaign_id, body.pause_status, principal)

@router.delete("/campaign/{campaign_id}", response_model=StatusResponse)
def delete_campaign(
    campaign_id: str,
    principal: Principal = Depends(get_principal),
    campaigns: CampaignService = Depends(get_campaign_service)
):
    campaigns.delete_campaign(campaign_id, principal)
    return StatusResponse()
