import logging
from botocore.exceptions import ClientError

from pethub.data_access.dynamodb import DynamoDataAccess, error_code, sort_key
from pethub.models.user import User

logger = logging.getLogger(__name__)

USER_PREFIX = "USER#"
PROFILE_SK = "PROFILE"
USER_ENTITY = "USER"

class UserRepository(DynamoDataAccess):

    def create_user(self, user: User) -> User:
        """Inserts a first-time user; an existing profile is returned unchanged."""
        item = {
            "PK": f"{USER_PREFIX}{user.email}",
            "SK": PROFILE_SK,
            "GSI1PK": USER_ENTITY,
            "GSI1SK": sort_key(user.joined_at, user.email),
            **user.model_dump(mode="json"),
        }

        try:
            self.table.put_item(
                Item=item,
                ConditionExpression="attribute_not_exists(PK)"
            )
            return user
        except ClientError as e:
            if error_code(e) == 'ConditionalCheckFailedException':
                logger.info(f"User profile already exists for {user.email}")
                return self.get_user(user.email)
            raise

    def get_user(self, email: str) -> User | None:
        item = self._get(f"{USER_PREFIX}{email}", PROFILE_SK)
        return User.model_validate(item) if item else None

    def list_users(self) -> list[User]:
        return [User.model_validate(item) for item in self._query_entities(USER_ENTITY)]

    def update_user(self, email: str, **fields) -> User | None:
        item = self._update_fields(f"{USER_PREFIX}{email}", PROFILE_SK, fields)
        return User.model_validate(item) if item else None
