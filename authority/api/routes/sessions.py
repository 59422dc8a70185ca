from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Header, status
from pydantic import BaseModel, Field

from authority.api.error import raise_for_error
from authority.app.services.clock import Clock
from authority.app.services.unit_of_work import UnitOfWork
from authority.app.use_cases.users import (
    ListSessionsUseCase,
    RevokeSessionsResponse,
    RevokeSessionsUseCase,
    SessionListResponse,
)
from authority.depends import get_clock, get_current_user, get_unit_of_work

router = APIRouter(prefix="/sessions", tags=["Sessions"])


@router.get("", status_code=status.HTTP_200_OK, response_model=SessionListResponse)
async def list_sessions(
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    clock: Clock = Depends(get_clock),
    x_refresh_token: Optional[str] = Header(None),
):
    """
    Live sessions of the signed-in account, newest first.

    Sending the caller's refresh token in X-Refresh-Token flags that session
    as current.
    """
    use_case = ListSessionsUseCase(uow, clock)
    result = await use_case.execute(current_user["account_id"], x_refresh_token)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


class RevokeOthersRequest(BaseModel):
    refresh_token: Optional[str] = Field(
        None, description="Refresh token of the session to keep"
    )


@router.post(
    "/revoke-others",
    status_code=status.HTTP_200_OK,
    response_model=RevokeSessionsResponse,
)
async def revoke_other_sessions(
    request: RevokeOthersRequest,
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    clock: Clock = Depends(get_clock),
):
    """Sign out every session except the one holding the given refresh token."""
    use_case = RevokeSessionsUseCase(uow, clock)
    result = await use_case.revoke_all_except(current_user["account_id"], request.refresh_token)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.delete(
    "/{session_id}",
    status_code=status.HTTP_200_OK,
    response_model=RevokeSessionsResponse,
)
async def revoke_session(
    session_id: UUID,
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    clock: Clock = Depends(get_clock),
):
    """
    Raises:
        - 404 Not Found: No live session with this id for the caller
    """
    use_case = RevokeSessionsUseCase(uow, clock)
    result = await use_case.revoke_one(current_user["account_id"], session_id)

    if result.is_err():
        raise_for_error(result.error)

    return result.value
