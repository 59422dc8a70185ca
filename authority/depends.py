from datetime import timedelta
from typing import Optional

from fastapi import Depends, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from authority.adapter.services.redis_rate_limiter import RedisRateLimiter
from authority.adapter.services.smtp_mail_sender import SmtpMailSender
from authority.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from authority.api.error import ClientError
from authority.app.errors import ErrorCode
from authority.app.services.clock import Clock, SystemClock
from authority.app.services.mail_sender import LoggingMailSender, MailSender
from authority.app.services.password_authenticator import PasswordAuthenticator
from authority.app.services.rate_limiter import InMemoryRateLimiter, RateLimiter
from authority.app.services.second_factor import SecondFactorVerifier
from authority.app.services.secret_token_codec import SecretTokenCodec
from authority.app.services.token_issuer import ClientInfo, TokenIssuer
from authority.app.use_cases.guards import parse_account_id
from authority.domain.entities import TokenPurpose
from authority.libs.result import Error

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

security = HTTPBearer(auto_error=False)

_clock = SystemClock()
_rate_limiter: Optional[RateLimiter] = None
_mail_sender: Optional[MailSender] = None


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


def get_clock() -> Clock:
    return _clock


def get_password_authenticator(clock: Clock = Depends(get_clock)) -> PasswordAuthenticator:
    return PasswordAuthenticator(
        clock,
        rounds=ApplicationConfig.BCRYPT_ROUNDS,
        hash_timeout_seconds=ApplicationConfig.PASSWORD_HASH_TIMEOUT_SECONDS,
        max_failed_attempts=ApplicationConfig.MAX_FAILED_LOGIN_ATTEMPTS,
        lockout_duration=timedelta(minutes=ApplicationConfig.LOCKOUT_MINUTES),
    )


def get_token_issuer(clock: Clock = Depends(get_clock)) -> TokenIssuer:
    return TokenIssuer(
        clock,
        access_secret=ApplicationConfig.JWT_SECRET,
        refresh_secret=ApplicationConfig.JWT_REFRESH_SECRET,
        access_ttl=timedelta(minutes=ApplicationConfig.ACCESS_TOKEN_MINUTES),
        refresh_ttl=timedelta(days=ApplicationConfig.REFRESH_TOKEN_DAYS),
        two_factor_ttl=timedelta(minutes=ApplicationConfig.TWO_FACTOR_TOKEN_MINUTES),
        algorithm=ApplicationConfig.JWT_ALGORITHM,
    )


def get_second_factor(clock: Clock = Depends(get_clock)) -> SecondFactorVerifier:
    return SecondFactorVerifier(
        clock,
        issuer_name=ApplicationConfig.TOTP_ISSUER,
        valid_window=ApplicationConfig.TOTP_VALID_WINDOW,
        backup_code_count=ApplicationConfig.BACKUP_CODE_COUNT,
    )


def get_token_codec(clock: Clock = Depends(get_clock)) -> SecretTokenCodec:
    return SecretTokenCodec(
        clock,
        lifetimes={
            TokenPurpose.password_reset: timedelta(
                minutes=ApplicationConfig.PASSWORD_RESET_TOKEN_MINUTES
            ),
            TokenPurpose.email_verification: timedelta(
                hours=ApplicationConfig.EMAIL_VERIFICATION_TOKEN_HOURS
            ),
        },
    )


def get_mail_sender() -> MailSender:
    global _mail_sender
    if _mail_sender is None:
        if ApplicationConfig.SMTP_HOST:
            _mail_sender = SmtpMailSender(
                host=ApplicationConfig.SMTP_HOST,
                port=ApplicationConfig.SMTP_PORT,
                user=ApplicationConfig.SMTP_USER or None,
                password=ApplicationConfig.SMTP_PASSWORD or None,
                use_tls=ApplicationConfig.SMTP_USE_TLS,
                from_email=ApplicationConfig.EMAIL_FROM,
                from_name=ApplicationConfig.EMAIL_FROM_NAME,
            )
        else:
            _mail_sender = LoggingMailSender()
    return _mail_sender


def get_rate_limiter() -> RateLimiter:
    global _rate_limiter
    if _rate_limiter is None:
        if ApplicationConfig.CACHE_BACKEND == "redis":
            _rate_limiter = RedisRateLimiter(ApplicationConfig.REDIS_URL)
        else:
            _rate_limiter = InMemoryRateLimiter()
    return _rate_limiter


def get_base_url() -> str:
    return ApplicationConfig.BASE_URL.rstrip("/")


def get_client_info(request: Request) -> ClientInfo:
    return ClientInfo(
        user_agent=request.headers.get("user-agent"),
        ip_address=request.client.host if request.client else None,
    )


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    token_issuer: TokenIssuer = Depends(get_token_issuer),
) -> dict:
    """
    Extract and verify the access token from the Authorization header.

    Refresh and two-factor tokens are rejected here even when their
    signature is valid.

    Returns:
        Decoded access token payload (sub, role, email) plus account_id as UUID

    Raises:
        ClientError: 401 INVALID_TOKEN if missing, invalid or expired
    """
    payload = None
    if credentials is not None:
        payload = token_issuer.decode_access_token(credentials.credentials)

    account_id = parse_account_id(payload.get("sub")) if payload else None
    if account_id is None or account_id.is_err():
        raise ClientError(
            Error(ErrorCode.INVALID_TOKEN, "Invalid or expired token"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    payload["account_id"] = account_id.value
    return payload
