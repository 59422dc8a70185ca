"""
Update Profile Use Case
"""

from uuid import UUID

from authority.app.errors import DuplicateRecordError, ErrorCode
from authority.app.serializers import AccountView, serialize_account
from authority.app.services.unit_of_work import UnitOfWork
from authority.app.use_cases.guards import load_active_account
from authority.domain.entities import AuditEvent
from authority.domain.password_policy import username_problem
from authority.libs.result import Error, Result, Return
from .dtos import UpdateProfileCommand

USERNAME_TAKEN = Error(ErrorCode.USERNAME_ALREADY_EXISTS, "Username already taken")


class UpdateProfileUseCase:
    """
    Business Rules:
    - Only fields present in the command change
    - Username must stay unique (case-insensitive)
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, account_id: UUID, command: UpdateProfileCommand) -> Result[AccountView]:
        if command.username is not None:
            problem = username_problem(command.username)
            if problem is not None:
                return Return.err(Error(ErrorCode.INVALID_INPUT, problem))

        async with self.uow:
            result = await load_active_account(self.uow, account_id)
            if result.is_err():
                return Return.err(result.error)
            account = result.value

            changed = []
            if command.username is not None and command.username != account.username:
                existing = await self.uow.accounts.get_by_username(command.username)
                if existing is not None and existing.id != account.id:
                    return Return.err(USERNAME_TAKEN)
                account.username = command.username
                changed.append("username")
            if command.first_name is not None:
                account.first_name = command.first_name
                changed.append("first_name")
            if command.last_name is not None:
                account.last_name = command.last_name
                changed.append("last_name")

            if changed:
                try:
                    account = await self.uow.accounts.update(account)
                except DuplicateRecordError:
                    return Return.err(USERNAME_TAKEN)

                await self.uow.audit_events.create(
                    AuditEvent(
                        account_id=account.id,
                        action="profile_updated",
                        event_metadata={"fields": changed},
                    )
                )
                await self.uow.commit()

            return Return.ok(serialize_account(account))
