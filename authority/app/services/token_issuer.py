"""
Token Issuer

Mints signed access, refresh and intermediate two-factor tokens, and
persists every refresh token as a Session.
"""

import hashlib
import uuid
from calendar import timegm
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from jose import JWTError, jwt

from authority.app.repositories.session_repository import ISessionRepository
from authority.app.services.clock import Clock
from authority.domain.entities import Account, Session, TokenType


@dataclass(frozen=True)
class ClientInfo:
    """Originating client descriptor recorded on new sessions"""

    user_agent: Optional[str] = None
    ip_address: Optional[str] = None


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str
    session: Session


class TokenIssuer:
    """
    Business Rules:
    - Access token: 15 minutes, claims sub/role/email, HS256 with the access secret
    - Refresh token: 7 days, claims sub/jti only, HS256 with a separate secret
    - Two-factor token: 5 minutes, only accepted by 2FA completion
    - Every token carries a `type` claim; decoding checks it
    - Expiry is checked against the injected clock
    """

    def __init__(
        self,
        clock: Clock,
        access_secret: str,
        refresh_secret: str,
        access_ttl: timedelta = timedelta(minutes=15),
        refresh_ttl: timedelta = timedelta(days=7),
        two_factor_ttl: timedelta = timedelta(minutes=5),
        algorithm: str = "HS256",
    ):
        self.clock = clock
        self.access_secret = access_secret
        self.refresh_secret = refresh_secret
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl
        self.two_factor_ttl = two_factor_ttl
        self.algorithm = algorithm

    @staticmethod
    def hash_token(token: str) -> str:
        return hashlib.sha256(token.encode()).hexdigest()

    def _encode(self, claims: dict, secret: str, ttl: timedelta) -> tuple[str, datetime]:
        now = self.clock.now()
        expires_at = now + ttl
        payload = {**claims, "iat": now, "exp": expires_at}
        return jwt.encode(payload, secret, algorithm=self.algorithm), expires_at

    def _decode(self, token: str, secret: str, token_type: TokenType) -> Optional[dict]:
        try:
            payload = jwt.decode(
                token,
                secret,
                algorithms=[self.algorithm],
                options={"verify_exp": False},
            )
        except JWTError:
            return None

        if payload.get("type") != token_type.value:
            return None
        exp = payload.get("exp")
        if not isinstance(exp, (int, float)):
            return None
        if exp <= timegm(self.clock.now().utctimetuple()):
            return None
        return payload

    def issue_access_token(self, account: Account) -> str:
        token, _ = self._encode(
            {
                "sub": str(account.id),
                "role": account.role.value,
                "email": account.email,
                "type": TokenType.access.value,
            },
            self.access_secret,
            self.access_ttl,
        )
        return token

    def issue_two_factor_token(self, account: Account) -> str:
        token, _ = self._encode(
            {"sub": str(account.id), "type": TokenType.two_factor.value},
            self.access_secret,
            self.two_factor_ttl,
        )
        return token

    async def issue_refresh_token(
        self,
        sessions: ISessionRepository,
        account: Account,
        client: Optional[ClientInfo] = None,
    ) -> tuple[str, Session]:
        """Sign a refresh token and persist it as a Session with the same expiry."""
        client = client or ClientInfo()
        token, expires_at = self._encode(
            {
                "sub": str(account.id),
                "type": TokenType.refresh.value,
                "jti": uuid.uuid4().hex,
            },
            self.refresh_secret,
            self.refresh_ttl,
        )
        session = Session(
            account_id=account.id,
            token_hash=self.hash_token(token),
            created_at=self.clock.now(),
            expires_at=expires_at,
            user_agent=client.user_agent[:512] if client.user_agent else None,
            ip_address=client.ip_address,
        )
        session = await sessions.create(session)
        return token, session

    async def issue_token_pair(
        self,
        sessions: ISessionRepository,
        account: Account,
        client: Optional[ClientInfo] = None,
    ) -> TokenPair:
        refresh_token, session = await self.issue_refresh_token(sessions, account, client)
        return TokenPair(
            access_token=self.issue_access_token(account),
            refresh_token=refresh_token,
            session=session,
        )

    def decode_access_token(self, token: str) -> Optional[dict]:
        return self._decode(token, self.access_secret, TokenType.access)

    def decode_two_factor_token(self, token: str) -> Optional[dict]:
        return self._decode(token, self.access_secret, TokenType.two_factor)

    def decode_refresh_token(self, token: str) -> Optional[dict]:
        return self._decode(token, self.refresh_secret, TokenType.refresh)
