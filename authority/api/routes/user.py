from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field, HttpUrl

from authority.api.error import raise_for_error
from authority.api.utils.rate_limit import AccountRateLimit
from authority.app.serializers import AccountView, StatusResponse
from authority.app.services.clock import Clock
from authority.app.services.password_authenticator import PasswordAuthenticator
from authority.app.services.token_issuer import ClientInfo, TokenIssuer
from authority.app.services.unit_of_work import UnitOfWork
from authority.app.use_cases.users import (
    ChangePasswordCommand,
    ChangePasswordUseCase,
    DeactivateAccountUseCase,
    UpdateProfileCommand,
    UpdateProfileUseCase,
    UpdateProfilePictureUseCase,
)
from authority.depends import (
    get_client_info,
    get_clock,
    get_current_user,
    get_password_authenticator,
    get_token_issuer,
    get_unit_of_work,
)

router = APIRouter(prefix="/users", tags=["User"])

account_rate_limit = AccountRateLimit("account")


class UpdateProfileRequest(BaseModel):
    username: Optional[str] = Field(None, max_length=30)
    first_name: Optional[str] = Field(None, min_length=1, max_length=50)
    last_name: Optional[str] = Field(None, min_length=1, max_length=50)


@router.patch("/profile", status_code=status.HTTP_200_OK, response_model=AccountView)
async def update_profile(
    request: UpdateProfileRequest,
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Update username and display names.

    Raises:
        - 409 Conflict: Username already taken
    """
    command = UpdateProfileCommand(
        username=request.username,
        first_name=request.first_name,
        last_name=request.last_name,
    )
    use_case = UpdateProfileUseCase(uow)
    result = await use_case.execute(current_user["account_id"], command)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


class UpdateProfilePictureRequest(BaseModel):
    profile_picture: HttpUrl


@router.patch("/profile-picture", status_code=status.HTTP_200_OK, response_model=AccountView)
async def update_profile_picture(
    request: UpdateProfilePictureRequest,
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Point the account at a new profile picture URL.

    Raises:
        - 400 Bad Request: Missing, malformed or overlong URL
    """
    use_case = UpdateProfilePictureUseCase(uow)
    result = await use_case.execute(current_user["account_id"], str(request.profile_picture))

    if result.is_err():
        raise_for_error(result.error)

    return result.value


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., min_length=1, max_length=128)
    new_password: str = Field(..., max_length=128)
    refresh_token: Optional[str] = Field(
        None, description="Refresh token of the session to keep signed in"
    )


@router.patch(
    "/password",
    status_code=status.HTTP_200_OK,
    response_model=StatusResponse,
    dependencies=[Depends(account_rate_limit)],
)
async def change_password(
    request: ChangePasswordRequest,
    client: ClientInfo = Depends(get_client_info),
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    clock: Clock = Depends(get_clock),
    authenticator: PasswordAuthenticator = Depends(get_password_authenticator),
    token_issuer: TokenIssuer = Depends(get_token_issuer),
):
    """
    Change password. Every session except the named one is signed out.

    Raises:
        - 400 Bad Request: Weak or unchanged password
        - 401 Unauthorized: Current password incorrect
        - 423 Locked: Too many failed attempts
        - 429 Too Many Requests: Per-account limit reached
    """
    command = ChangePasswordCommand(
        current_password=request.current_password,
        new_password=request.new_password,
        refresh_token=request.refresh_token,
    )
    use_case = ChangePasswordUseCase(uow, clock, authenticator, token_issuer)
    result = await use_case.execute(current_user["account_id"], command, client.ip_address)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


class DeactivateAccountRequest(BaseModel):
    password: str = Field(..., min_length=1, max_length=128)


@router.delete(
    "/account",
    status_code=status.HTTP_200_OK,
    response_model=StatusResponse,
    dependencies=[Depends(account_rate_limit)],
)
async def deactivate_account(
    request: DeactivateAccountRequest,
    client: ClientInfo = Depends(get_client_info),
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    clock: Clock = Depends(get_clock),
    authenticator: PasswordAuthenticator = Depends(get_password_authenticator),
):
    """
    Deactivate the account and sign out every session.

    Raises:
        - 401 Unauthorized: Password incorrect
        - 423 Locked: Too many failed attempts
    """
    use_case = DeactivateAccountUseCase(uow, clock, authenticator)
    result = await use_case.execute(current_user["account_id"], request.password, client.ip_address)

    if result.is_err():
        raise_for_error(result.error)

    return result.value
