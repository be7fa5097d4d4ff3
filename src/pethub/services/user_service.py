import logging

from pethub.core.errors import NotFound
from pethub.data_access.users import UserRepository
from pethub.models.user import Principal, Role, User, UserStatus
from pethub.services.access_policy import AccessPolicy

logger = logging.getLogger(__name__)

class UserService:
    def __init__(self, users: UserRepository, policy: AccessPolicy):
        self.users = users
        self.policy = policy

    def login(self, email: str, name: str | None = None, photo_url: str | None = None,
              status: UserStatus | None = None) -> User:
        """
        Saves the user on first login. A returning user is handed back as
        stored, unless they are asking for a role change.
        """
        existing = self.users.get_user(email)
        if existing:
            if status == "Requested":
                logger.info(f"Role request recorded for {email}")
                return self.users.update_user(email, status="Requested")
            return existing

        user = User(email=email, name=name, photo_url=photo_url, status=status or "none")
        logger.info(f"Saving first-time user {email}")
        return self.users.create_user(user)

    def principal_for(self, email: str, name: str | None = None) -> Principal:
        user = self.users.get_user(email)
        role: Role = user.role if user else "user"
        return Principal(email=email, name=name, role=role)

    def get_user(self, email: str, principal: Principal) -> User:
        self.policy.enforce(principal, "users:read", email)
        user = self.users.get_user(email)
        if user is None:
            raise NotFound(f"User {email} not found")
        return user

    def list_users(self, principal: Principal) -> list[User]:
        self.policy.enforce(principal, "users:list")
        return self.users.list_users()

    def change_role(self, email: str, role: Role, principal: Principal) -> User:
        self.policy.enforce(principal, "users:change_role")
        user = self.users.update_user(email, role=role, status="verified")
        if user is None:
            raise NotFound(f"User {email} not found")
        logger.info(f"{principal.email} changed role of {email} to {role}")
        return user
