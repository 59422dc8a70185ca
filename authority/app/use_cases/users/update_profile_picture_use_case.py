"""
Update Profile Picture Use Case
"""

from uuid import UUID

from authority.app.errors import ErrorCode
from authority.app.serializers import AccountView, serialize_account
from authority.app.services.unit_of_work import UnitOfWork
from authority.app.use_cases.guards import load_active_account
from authority.domain.entities import AuditEvent
from authority.libs.result import Error, Result, Return

MAX_PICTURE_URL_LENGTH = 500


class UpdateProfilePictureUseCase:
    """
    Business Rules:
    - The picture is stored as a URL, the image itself lives elsewhere
    - URLs longer than 500 characters are rejected
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, account_id: UUID, picture_url: str) -> Result[AccountView]:
        if not picture_url:
            return Return.err(Error(ErrorCode.INVALID_INPUT, "Profile picture URL is required"))
        if len(picture_url) > MAX_PICTURE_URL_LENGTH:
            return Return.err(
                Error(
                    ErrorCode.INVALID_INPUT,
                    f"Profile picture URL must be at most {MAX_PICTURE_URL_LENGTH} characters",
                )
            )

        async with self.uow:
            result = await load_active_account(self.uow, account_id)
            if result.is_err():
                return Return.err(result.error)
            account = result.value

            account.profile_picture = picture_url
            account = await self.uow.accounts.update(account)
            await self.uow.audit_events.create(
                AuditEvent(account_id=account.id, action="profile_picture_updated")
            )
            await self.uow.commit()

            return Return.ok(serialize_account(account))
