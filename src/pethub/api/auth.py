from fastapi import Depends, Request
from fastapi.security import HTTPBearer
from pydantic import ValidationError
from typing import Optional

from pethub.api.schemas import CognitoUser
from pethub.core.dependencies import get_user_service
from pethub.core.errors import Forbidden, Unauthorized
from pethub.models.user import Principal
from pethub.services.user_service import UserService

security = HTTPBearer(auto_error=False)

async def get_current_user(
    request: Request,
    token: Optional[str] = Depends(security)
) -> CognitoUser:
    """
    The token is verified by the API Gateway authorizer; its claims arrive
    in the Lambda event that Mangum places on the ASGI scope.
    """
    auth = request.scope.get("aws.event", {}).get("requestContext", {}).get("authorizer", {})
    claims = auth.get("claims", {})

    if not claims:
        raise Unauthorized("unauthorized access")

    try:
        user = CognitoUser(**claims)
    except ValidationError:
        raise Unauthorized("unauthorized access")

    if not user.email_verified:
        raise Forbidden("Email not verified")

    return user

def get_principal(
    user: CognitoUser = Depends(get_current_user),
    users: UserService = Depends(get_user_service)
) -> Principal:
    return users.principal_for(user.email, user.name)
