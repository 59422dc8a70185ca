from typing import Union
from uuid import UUID

from authority.app.errors import ErrorCode
from authority.app.services.password_authenticator import ACCOUNT_DISABLED
from authority.app.services.unit_of_work import UnitOfWork
from authority.domain.entities import Account
from authority.libs.result import Error, Result, Return

INVALID_TOKEN = Error(ErrorCode.INVALID_TOKEN, "Invalid or expired token")


def parse_account_id(value: Union[str, UUID, None]) -> Result[UUID]:
    if isinstance(value, UUID):
        return Return.ok(value)
    try:
        return Return.ok(UUID(str(value)))
    except ValueError:
        return Return.err(INVALID_TOKEN)


async def load_active_account(uow: UnitOfWork, account_id: Union[str, UUID]) -> Result[Account]:
    """
    Resolve the subject of an access token to a usable account.

    Must be called inside an open unit of work.

    Errors:
        - INVALID_TOKEN: Subject is malformed or no longer exists
        - ACCOUNT_DISABLED: Account has been deactivated
    """
    parsed = parse_account_id(account_id)
    if parsed.is_err():
        return Return.err(parsed.error)

    account = await uow.accounts.get_by_id(parsed.value)
    if account is None:
        return Return.err(INVALID_TOKEN)
    if not account.is_active:
        return Return.err(ACCOUNT_DISABLED)
    return Return.ok(account)
