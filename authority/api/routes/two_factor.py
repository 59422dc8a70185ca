from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from authority.api.error import raise_for_error
from authority.api.utils.rate_limit import AccountRateLimit
from authority.app.serializers import StatusResponse
from authority.app.services.clock import Clock
from authority.app.services.password_authenticator import PasswordAuthenticator
from authority.app.services.second_factor import SecondFactorVerifier
from authority.app.services.token_issuer import ClientInfo
from authority.app.services.unit_of_work import UnitOfWork
from authority.app.use_cases.two_factor import (
    DisableTwoFactorUseCase,
    EnableTwoFactorUseCase,
    SetupTwoFactorUseCase,
    TwoFactorSetupResponse,
)
from authority.depends import (
    get_client_info,
    get_clock,
    get_current_user,
    get_password_authenticator,
    get_second_factor,
    get_unit_of_work,
)

router = APIRouter(prefix="/auth/2fa", tags=["Two-Factor"])

account_rate_limit = AccountRateLimit("account")


class TwoFactorCodeRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=64)


@router.post(
    "/setup",
    status_code=status.HTTP_200_OK,
    response_model=TwoFactorSetupResponse,
    dependencies=[Depends(account_rate_limit)],
)
async def setup_two_factor(
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    verifier: SecondFactorVerifier = Depends(get_second_factor),
):
    """
    Start 2FA enrollment.

    Returns the secret, the otpauth:// provisioning URI and the backup codes.
    The codes are only ever shown in this response.

    Raises:
        - 409 Conflict: 2FA already enabled
    """
    use_case = SetupTwoFactorUseCase(uow, verifier)
    result = await use_case.execute(current_user["account_id"])

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.post(
    "/enable",
    status_code=status.HTTP_200_OK,
    response_model=StatusResponse,
    dependencies=[Depends(account_rate_limit)],
)
async def enable_two_factor(
    request: TwoFactorCodeRequest,
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    verifier: SecondFactorVerifier = Depends(get_second_factor),
):
    """
    Confirm enrollment with a code from the authenticator app.

    Raises:
        - 400 Bad Request: Setup not started
        - 401 Unauthorized: Wrong code
    """
    use_case = EnableTwoFactorUseCase(uow, verifier)
    result = await use_case.execute(current_user["account_id"], request.code)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.post(
    "/disable",
    status_code=status.HTTP_200_OK,
    response_model=StatusResponse,
    dependencies=[Depends(account_rate_limit)],
)
async def disable_two_factor(
    request: TwoFactorCodeRequest,
    client: ClientInfo = Depends(get_client_info),
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    clock: Clock = Depends(get_clock),
    authenticator: PasswordAuthenticator = Depends(get_password_authenticator),
    verifier: SecondFactorVerifier = Depends(get_second_factor),
):
    """
    Raises:
        - 400 Bad Request: 2FA not enabled
        - 401 Unauthorized: Wrong code
        - 423 Locked: Too many failed attempts
    """
    use_case = DisableTwoFactorUseCase(uow, clock, authenticator, verifier)
    result = await use_case.execute(
        current_user["account_id"], request.code, client.ip_address
    )

    if result.is_err():
        raise_for_error(result.error)

    return result.value
