import logging
from datetime import date
from typing import Any

from pethub.core.errors import InvalidAmount, NotFound, PetHubError
from pethub.data_access.campaigns import CampaignRepository
from pethub.models.campaign import Campaign
from pethub.models.page import Page, paginate
from pethub.models.user import Principal
from pethub.services.access_policy import AccessPolicy
from pethub.services.pet_service import matches_search

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset({
    "pet_name", "pet_image", "target", "last_date",
    "short_description", "long_description",
})


def validate_target(target: Any) -> None:
    if isinstance(target, bool) or not isinstance(target, int) or target <= 0:
        raise InvalidAmount("Target must be a positive amount in cents")


def _iso_date(value: date | str) -> str:
    if isinstance(value, date):
        return value.isoformat()
    try:
        return date.fromisoformat(value).isoformat()
    except (TypeError, ValueError):
        raise PetHubError(f"last_date must be an ISO date, got {value!r}")


class CampaignService:
    def __init__(self, campaigns: CampaignRepository, policy: AccessPolicy):
        self.campaigns = campaigns
        self.policy = policy

    def create_campaign(self, principal: Principal, target: int, **meta: Any) -> Campaign:
        validate_target(target)
        campaign = Campaign(creator_email=principal.email, target=target, **meta)
        self.campaigns.create_campaign(campaign)
        logger.info(f"Campaign {campaign.campaign_id} created by {principal.email}")
        return campaign

    def get_campaign(self, campaign_id: str) -> Campaign:
        campaign = self.campaigns.get_campaign(campaign_id)
        if campaign is None:
            raise NotFound(f"Campaign {campaign_id} not found")
        return campaign

    def list_campaigns(self, page: int = 0, limit: int = 6, search: str = "",
                       category: str = "", exclude_id: str | None = None) -> Page:
        campaigns = [
            c for c in self.campaigns.list_campaigns()
            if c.campaign_id != exclude_id
            and (not category or c.pet_category == category)
            and (not search or matches_search(search, c.pet_name, c.pet_category))
        ]
        return paginate(campaigns, page, limit)

    def list_campaigns_by_creator(self, email: str, principal: Principal) -> list[Campaign]:
        self.policy.enforce(principal, "campaigns:list_own", email)
        return self.campaigns.list_campaigns_by_creator(email)

    def update_campaign(self, campaign_id: str, fields: dict[str, Any], principal: Principal) -> Campaign:
        campaign = self.get_campaign(campaign_id)
        self.policy.enforce(principal, "campaigns:update", campaign.creator_email)

        changes = {k: v for k, v in fields.items() if k in EDITABLE_FIELDS}
        if "target" in changes:
            validate_target(changes["target"])
        if changes.get("last_date") is not None:
            changes["last_date"] = _iso_date(changes["last_date"])
        if not changes:
            return campaign
        return self._apply(campaign_id, changes)

    def pause_campaign(self, campaign_id: str, paused: bool, principal: Principal) -> Campaign:
        campaign = self.get_campaign(campaign_id)
        self.policy.enforce(principal, "campaigns:update", campaign.creator_email)
        logger.info(f"Campaign {campaign_id} pause status set to {paused}")
        return self._apply(campaign_id, {"pause_status": paused})

    def delete_campaign(self, campaign_id: str, principal: Principal) -> None:
        self.policy.enforce(principal, "campaigns:delete")
        if not self.campaigns.delete_campaign(campaign_id):
            raise NotFound(f"Campaign {campaign_id} not found")
        logger.info(f"Campaign {campaign_id} deleted by {principal.email}")

    def _apply(self, campaign_id: str, changes: dict[str, Any]) -> Campaign:
        updated = self.campaigns.update_campaign(campaign_id, changes)
        if updated is None:
            raise NotFound(f"Campaign {campaign_id} not found")
        return updated
