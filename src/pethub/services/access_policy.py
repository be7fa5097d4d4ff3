import logging
from typing import Literal

from pethub.core.errors import Forbidden
from pethub.models.user import Principal

logger = logging.getLogger(__name__)

Decision = Literal["allow", "forbidden"]
ALLOW: Decision = "allow"
FORBIDDEN: Decision = "forbidden"

ADMIN_ONLY_ACTIONS = frozenset({
    "users:list",
    "users:change_role",
    "pets:list_all",
    "campaigns:delete",
})

class AccessPolicy:
    """
    Role and ownership rules. Admins may do anything; everyone else may act
    only on resources keyed by their own email. Emails are compared exactly.
    """

    def authorize(self, principal: Principal, action: str, resource_owner: str | None = None) -> Decision:
        if principal.is_admin:
            return ALLOW
        if action in ADMIN_ONLY_ACTIONS:
            return FORBIDDEN
        if resource_owner is None:
            return ALLOW
        return ALLOW if principal.email == resource_owner else FORBIDDEN

    def enforce(self, principal: Principal, action: str, resource_owner: str | None = None) -> None:
        if self.authorize(principal, action, resource_owner) == FORBIDDEN:
            logger.info(f"Denied {action} for {principal.email}")
            raise Forbidden("forbidden access")
