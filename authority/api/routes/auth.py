from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, EmailStr, Field

from authority.api.error import raise_for_error
from authority.api.utils.rate_limit import RateLimit
from authority.app.serializers import AccountView, StatusResponse
from authority.app.services.clock import Clock
from authority.app.services.mail_sender import MailSender
from authority.app.services.password_authenticator import PasswordAuthenticator
from authority.app.services.second_factor import SecondFactorVerifier
from authority.app.services.secret_token_codec import SecretTokenCodec
from authority.app.services.token_issuer import ClientInfo, TokenIssuer
from authority.app.services.unit_of_work import UnitOfWork
from authority.app.use_cases.auth import (
    ConfirmPasswordResetUseCase,
    LoginResponse,
    LoginUseCase,
    LogoutUseCase,
    RefreshTokenResponse,
    RefreshTokenUseCase,
    RegisterCommand,
    RegisterResponse,
    RegisterUseCase,
    RequestPasswordResetUseCase,
    ResendVerificationUseCase,
    VerifyEmailUseCase,
    VerifyTwoFactorUseCase,
)
from authority.app.use_cases.users import GetCurrentAccountUseCase
from authority.depends import (
    get_base_url,
    get_client_info,
    get_clock,
    get_current_user,
    get_mail_sender,
    get_password_authenticator,
    get_second_factor,
    get_token_codec,
    get_token_issuer,
    get_unit_of_work,
)

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"],
)

auth_rate_limit = RateLimit("auth")


class RegisterRequest(BaseModel):
    """
    Registration HTTP request payload

    Password strength and username format are checked by the use case so the
    messages match the policy exactly.
    """

    email: EmailStr = Field(..., description="Account email address")
    password: str = Field(..., max_length=128, description="Account password")
    username: Optional[str] = Field(None, max_length=30)
    first_name: Optional[str] = Field(None, max_length=50)
    last_name: Optional[str] = Field(None, max_length=50)


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=RegisterResponse,
    dependencies=[Depends(auth_rate_limit)],
)
async def register(
    request: RegisterRequest,
    client: ClientInfo = Depends(get_client_info),
    uow: UnitOfWork = Depends(get_unit_of_work),
    authenticator: PasswordAuthenticator = Depends(get_password_authenticator),
    token_issuer: TokenIssuer = Depends(get_token_issuer),
    token_codec: SecretTokenCodec = Depends(get_token_codec),
    mail_sender: MailSender = Depends(get_mail_sender),
    base_url: str = Depends(get_base_url),
):
    """
    Register a new account.

    Returns the account (unverified), an access token and a refresh token.

    Raises:
        - 400 Bad Request: Invalid input or weak password
        - 409 Conflict: Email or username already taken
    """
    command = RegisterCommand(
        email=request.email,
        password=request.password,
        username=request.username,
        first_name=request.first_name,
        last_name=request.last_name,
    )
    use_case = RegisterUseCase(uow, authenticator, token_issuer, token_codec, mail_sender, base_url)
    result = await use_case.execute(command, client)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


class LoginRequest(BaseModel):
    email: EmailStr = Field(..., description="Account email address")
    password: str = Field(..., min_length=1, max_length=128, description="Account password")


@router.post(
    "/login",
    status_code=status.HTTP_200_OK,
    response_model=LoginResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(auth_rate_limit)],
)
async def login(
    request: LoginRequest,
    client: ClientInfo = Depends(get_client_info),
    uow: UnitOfWork = Depends(get_unit_of_work),
    clock: Clock = Depends(get_clock),
    authenticator: PasswordAuthenticator = Depends(get_password_authenticator),
    token_issuer: TokenIssuer = Depends(get_token_issuer),
):
    """
    Password login.

    If two-factor authentication is enabled the response carries
    requires_two_factor and a short-lived two_factor_token to pass to
    /auth/verify-2fa; otherwise it carries the tokens and session id.

    Raises:
        - 401 Unauthorized: Invalid credentials
        - 403 Forbidden: Account deactivated
        - 423 Locked: Too many failed attempts
    """
    use_case = LoginUseCase(uow, clock, authenticator, token_issuer)
    result = await use_case.execute(request.email, request.password, client)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


class VerifyTwoFactorRequest(BaseModel):
    two_factor_token: str = Field(..., min_length=1)
    code: str = Field(..., min_length=1, max_length=64, description="TOTP or backup code")


@router.post(
    "/verify-2fa",
    status_code=status.HTTP_200_OK,
    response_model=LoginResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(auth_rate_limit)],
)
async def verify_two_factor(
    request: VerifyTwoFactorRequest,
    client: ClientInfo = Depends(get_client_info),
    uow: UnitOfWork = Depends(get_unit_of_work),
    clock: Clock = Depends(get_clock),
    authenticator: PasswordAuthenticator = Depends(get_password_authenticator),
    verifier: SecondFactorVerifier = Depends(get_second_factor),
    token_issuer: TokenIssuer = Depends(get_token_issuer),
):
    """
    Complete a two-factor login with a TOTP code or a backup code.

    Raises:
        - 401 Unauthorized: Bad two-factor token or code
        - 423 Locked: Too many failed attempts
    """
    use_case = VerifyTwoFactorUseCase(uow, clock, authenticator, verifier, token_issuer)
    result = await use_case.execute(request.two_factor_token, request.code, client)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


class RefreshRequest(BaseModel):
    refresh_token: str = Field(..., min_length=1, description="Refresh token")


@router.post("/refresh-token", status_code=status.HTTP_200_OK, response_model=RefreshTokenResponse)
async def refresh_token(
    request: RefreshRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    clock: Clock = Depends(get_clock),
    token_issuer: TokenIssuer = Depends(get_token_issuer),
):
    """
    Exchange a refresh token for a new access token.

    Raises:
        - 401 Unauthorized: Invalid, expired or revoked refresh token
        - 403 Forbidden: Account deactivated
    """
    use_case = RefreshTokenUseCase(uow, clock, token_issuer)
    result = await use_case.execute(request.refresh_token)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.post("/logout", status_code=status.HTTP_200_OK, response_model=StatusResponse)
async def logout(
    request: RefreshRequest,
    client: ClientInfo = Depends(get_client_info),
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    clock: Clock = Depends(get_clock),
    token_issuer: TokenIssuer = Depends(get_token_issuer),
):
    """Revoke the session of the given refresh token. Idempotent."""
    use_case = LogoutUseCase(uow, clock, token_issuer)
    result = await use_case.execute(
        current_user["account_id"], request.refresh_token, client.ip_address
    )

    if result.is_err():
        raise_for_error(result.error)

    return result.value


class EmailRequest(BaseModel):
    email: EmailStr


@router.post(
    "/forgot-password",
    status_code=status.HTTP_200_OK,
    response_model=StatusResponse,
    dependencies=[Depends(auth_rate_limit)],
)
async def forgot_password(
    request: EmailRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    token_codec: SecretTokenCodec = Depends(get_token_codec),
    mail_sender: MailSender = Depends(get_mail_sender),
    base_url: str = Depends(get_base_url),
):
    """
    Request a password reset link.

    The response is identical whether or not the email is registered.
    """
    use_case = RequestPasswordResetUseCase(uow, token_codec, mail_sender, base_url)
    result = await use_case.execute(request.email)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


class ResetPasswordRequest(BaseModel):
    token: str = Field(..., min_length=1, description="Token from the reset email")
    password: str = Field(..., max_length=128, description="New password")


@router.post(
    "/reset-password",
    status_code=status.HTTP_200_OK,
    response_model=StatusResponse,
    dependencies=[Depends(auth_rate_limit)],
)
async def reset_password(
    request: ResetPasswordRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    clock: Clock = Depends(get_clock),
    authenticator: PasswordAuthenticator = Depends(get_password_authenticator),
    token_codec: SecretTokenCodec = Depends(get_token_codec),
):
    """
    Set a new password using a reset token. Signs out every session.

    Raises:
        - 400 Bad Request: Invalid/expired token or weak password
    """
    use_case = ConfirmPasswordResetUseCase(uow, clock, authenticator, token_codec)
    result = await use_case.execute(request.token, request.password)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.post(
    "/resend-verification",
    status_code=status.HTTP_200_OK,
    response_model=StatusResponse,
    dependencies=[Depends(auth_rate_limit)],
)
async def resend_verification(
    request: EmailRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    token_codec: SecretTokenCodec = Depends(get_token_codec),
    mail_sender: MailSender = Depends(get_mail_sender),
    base_url: str = Depends(get_base_url),
):
    """Send a new verification link. Same response for every email."""
    use_case = ResendVerificationUseCase(uow, token_codec, mail_sender, base_url)
    result = await use_case.execute(request.email)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


class VerifyEmailRequest(BaseModel):
    token: str = Field(..., min_length=1, description="Token from the verification email")


@router.post("/verify-email", status_code=status.HTTP_200_OK, response_model=StatusResponse)
async def verify_email(
    request: VerifyEmailRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    token_codec: SecretTokenCodec = Depends(get_token_codec),
):
    """
    Raises:
        - 400 Bad Request: Invalid or expired token
    """
    use_case = VerifyEmailUseCase(uow, token_codec)
    result = await use_case.execute(request.token)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.get("/me", status_code=status.HTTP_200_OK, response_model=AccountView)
async def get_me(
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Current account.

    Raises:
        - 401 Unauthorized: Invalid or expired access token
        - 403 Forbidden: Account deactivated
    """
    use_case = GetCurrentAccountUseCase(uow)
    result = await use_case.execute(current_user["account_id"])

    if result.is_err():
        raise_for_error(result.error)

    return result.value
