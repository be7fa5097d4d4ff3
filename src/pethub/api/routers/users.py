from fastapi import APIRouter, Depends

from pethub.api.auth import get_current_user, get_principal
from pethub.api.schemas import CognitoUser, LoginRequest, RoleChangeRequest
from pethub.core.dependencies import get_user_service
from pethub.core.errors import Forbidden
from pethub.models.user import Principal, User
from pethub.services.user_service import UserService

router = APIRouter(tags=["users"])

@router.put("/user", response_model=User)
def save_user(
    body: LoginRequest,
    user: CognitoUser = Depends(get_current_user),
    users: UserService = Depends(get_user_service)
):
    if body.email != user.email:
        raise Forbidden("forbidden access")
    return users.login(
        email=body.email,
        name=body.name or user.name,
        photo_url=body.photo_url,
        status=body.status
    )

@router.get("/user/{email}", response_model=User)
def get_user(
    email: str,
    principal: Principal = Depends(get_principal),
    users: UserService = Depends(get_user_service)
):
    return users.get_user(email, principal)

@router.get("/users", response_model=list[User])
def list_users(
    principal: Principal = Depends(get_principal),
    users: UserService = Depends(get_user_service)
):
    return users.list_users(principal)

@router.patch("/users/{email}/role", response_model=User)
def change_role(
    email: str,
    body: RoleChangeRequest,
    principal: Principal = Depends(get_principal),
    users: UserService = Depends(get_user_service)
):
    return users.change_role(email, body.role, principal)
