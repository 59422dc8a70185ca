"""
Register Use Case

Creates an account, issues its first session and sends the verification email.
"""

import logging
from typing import Optional

from authority.app.errors import DuplicateRecordError, ErrorCode
from authority.app.serializers import serialize_account
from authority.app.services.mail_sender import MailSender, deliver, verification_email
from authority.app.services.password_authenticator import PasswordAuthenticator
from authority.app.services.secret_token_codec import SecretTokenCodec
from authority.app.services.token_issuer import ClientInfo, TokenIssuer
from authority.app.services.unit_of_work import UnitOfWork
from authority.domain.entities import Account, AuditEvent, TokenPurpose
from authority.domain.password_policy import normalize_email, password_problem, username_problem
from authority.libs.result import Error, Result, Return
from .dtos import RegisterCommand, RegisterResponse

logger = logging.getLogger(__name__)

EMAIL_TAKEN = Error(ErrorCode.EMAIL_ALREADY_EXISTS, "Email already registered")
USERNAME_TAKEN = Error(ErrorCode.USERNAME_ALREADY_EXISTS, "Username already taken")


class RegisterUseCase:
    """
    Use case for account registration.

    Business Rules:
    - Email is normalized (trimmed, lower-cased) and must be unique
    - Username, when given, is unique case-insensitively
    - Password must satisfy the strength policy; stored as bcrypt hash
    - Account starts unverified; a 24 hour verification token is emailed
    - Registration signs the caller in (access + refresh token, new session)
    - Verification email is sent after commit; delivery failure is only logged
    """

    def __init__(
        self,
        uow: UnitOfWork,
        authenticator: PasswordAuthenticator,
        token_issuer: TokenIssuer,
        token_codec: SecretTokenCodec,
        mail_sender: MailSender,
        base_url: str,
    ):
        self.uow = uow
        self.authenticator = authenticator
        self.token_issuer = token_issuer
        self.token_codec = token_codec
        self.mail_sender = mail_sender
        self.base_url = base_url

    async def execute(
        self, command: RegisterCommand, client: Optional[ClientInfo] = None
    ) -> Result[RegisterResponse]:
        """
        Execute registration.

        Errors:
            - INVALID_INPUT: Weak password or malformed username
            - EMAIL_ALREADY_EXISTS: Email taken
            - USERNAME_ALREADY_EXISTS: Username taken
        """
        problem = password_problem(command.password)
        if problem is None and command.username is not None:
            problem = username_problem(command.username)
        if problem is not None:
            return Return.err(Error(ErrorCode.INVALID_INPUT, problem))

        email = normalize_email(command.email)
        client = client or ClientInfo()

        async with self.uow:
            if await self.uow.accounts.get_by_email(email) is not None:
                return Return.err(EMAIL_TAKEN)
            if command.username and await self.uow.accounts.get_by_username(command.username):
                return Return.err(USERNAME_TAKEN)

            account = Account(
                email=email,
                username=command.username,
                first_name=command.first_name,
                last_name=command.last_name,
            )
            await self.authenticator.set_password(account, command.password)
            issued = self.token_codec.issue_for(account, TokenPurpose.email_verification)

            try:
                account = await self.uow.accounts.create(account)
            except DuplicateRecordError as exc:
                # Lost a race with a concurrent registration
                return Return.err(USERNAME_TAKEN if exc.field == "username" else EMAIL_TAKEN)

            pair = await self.token_issuer.issue_token_pair(self.uow.sessions, account, client)

            await self.uow.audit_events.create(
                AuditEvent(
                    account_id=account.id,
                    action="register",
                    event_metadata={"session_id": str(pair.session.id)},
                    ip_address=client.ip_address,
                )
            )
            await self.uow.commit()

        logger.info(f"Account {account.id} registered")
        await deliver(
            self.mail_sender, account.email, verification_email(self.base_url, issued.plaintext)
        )

        return Return.ok(
            RegisterResponse(
                account=serialize_account(account),
                access_token=pair.access_token,
                refresh_token=pair.refresh_token,
                session_id=str(pair.session.id),
            )
        )
