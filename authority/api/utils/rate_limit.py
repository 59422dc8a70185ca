import logging
from typing import Optional

from fastapi import Depends, Request, Response, status

from config import ApplicationConfig
from authority.api.error import ClientError
from authority.app.errors import ErrorCode
from authority.app.services.rate_limiter import RateLimiter
from authority.depends import get_current_user, get_rate_limiter
from authority.libs.result import Error

logger = logging.getLogger(__name__)


class RateLimit:
    """
    Route dependency counting requests per client IP and scope.

    Exceeding the limit raises 429 RATE_LIMITED with a Retry-After header.
    """

    def __init__(
        self, scope: str, limit: Optional[int] = None, window_seconds: Optional[int] = None
    ):
        self.scope = scope
        self.limit = limit
        self.window_seconds = window_seconds

    def _limits(self):
        return (
            self.limit or ApplicationConfig.AUTH_RATE_LIMIT,
            self.window_seconds or ApplicationConfig.AUTH_RATE_WINDOW_SECONDS,
        )

    async def _check(
        self, limiter: RateLimiter, response: Response, subject: str
    ) -> None:
        if not ApplicationConfig.RATE_LIMIT_ENABLED:
            return

        limit, window = self._limits()
        decision = await limiter.hit(f"{self.scope}:{subject}", limit, window)
        response.headers["X-RateLimit-Limit"] = str(limit)
        response.headers["X-RateLimit-Remaining"] = str(decision.remaining)

        if not decision.allowed:
            logger.warning(f"Rate limit exceeded for {self.scope} from {subject}")
            raise ClientError(
                Error(
                    ErrorCode.RATE_LIMITED,
                    "Too many requests, please try again later.",
                ),
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                headers={"Retry-After": str(decision.reset_seconds)},
            )

    async def __call__(
        self,
        request: Request,
        response: Response,
        limiter: RateLimiter = Depends(get_rate_limiter),
    ) -> None:
        client_ip = request.client.host if request.client else "unknown"
        await self._check(limiter, response, client_ip)


class AccountRateLimit(RateLimit):
    """Same window, keyed by the signed-in account instead of the client IP."""

    def _limits(self):
        return (
            self.limit or ApplicationConfig.ACCOUNT_RATE_LIMIT,
            self.window_seconds or ApplicationConfig.ACCOUNT_RATE_WINDOW_SECONDS,
        )

    async def __call__(
        self,
        response: Response,
        current_user: dict = Depends(get_current_user),
        limiter: RateLimiter = Depends(get_rate_limiter),
    ) -> None:
        await self._check(limiter, response, str(current_user["account_id"]))
