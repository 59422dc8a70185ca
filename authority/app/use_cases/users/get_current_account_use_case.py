from uuid import UUID

from authority.app.serializers import AccountView, serialize_account
from authority.app.services.unit_of_work import UnitOfWork
from authority.app.use_cases.guards import load_active_account
from authority.libs.result import Result, Return


class GetCurrentAccountUseCase:
    """Returns the public view of the access token's subject."""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, account_id: UUID) -> Result[AccountView]:
        async with self.uow:
            result = await load_active_account(self.uow, account_id)
            if result.is_err():
                return Return.err(result.error)
            return Return.ok(serialize_account(result.value))
