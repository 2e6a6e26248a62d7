"""
Account endpoints.

CRUD over accounts plus lookup by name.
"""

from typing import List
from uuid import UUID

import structlog
from fastapi import APIRouter, Depends, Request, Response, status

from ..dependencies import get_account_service
from ..domain.exceptions import ValidationException
from ..models import (
    AccountResponse,
    CreateAccountRequest,
    ErrorResponse,
    UpdateAccountRequest,
)
from ..services.account_service import AccountService
from .errors import bad_request, not_found

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/Account", tags=["accounts"])


@router.get("", response_model=List[AccountResponse], summary="List accounts")
async def get_all_accounts(
    service: AccountService = Depends(get_account_service),
) -> List[AccountResponse]:
    return await service.get_all_accounts()


@router.get(
    "/name/{name}",
    response_model=List[AccountResponse],
    responses={400: {"description": "Empty name", "model": ErrorResponse}},
    summary="Find accounts by name",
)
async def get_accounts_by_name(
    name: str,
    service: AccountService = Depends(get_account_service),
) -> List[AccountResponse]:
    if not name.strip():
        raise bad_request(ValidationException("name", name, "Account name is required"))
    return await service.get_accounts_by_name(name)


@router.get(
    "/{account_id}",
    response_model=AccountResponse,
    responses={404: {"description": "Account not found", "model": ErrorResponse}},
    summary="Get account",
)
async def get_account_by_id(
    account_id: UUID,
    service: AccountService = Depends(get_account_service),
) -> AccountResponse:
    account = await service.get_account_by_id(account_id)
    if account is None:
        raise not_found("Account", account_id)
    return account


@router.post(
    "",
    response_model=AccountResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create account",
)
async def create_account(
    payload: CreateAccountRequest,
    request: Request,
    response: Response,
    service: AccountService = Depends(get_account_service),
) -> AccountResponse:
    account = await service.create_account(payload)
    response.headers["Location"] = str(
        request.url_for("get_account_by_id", account_id=account.id)
    )
    logger.info("Account created", account_id=str(account.id))
    return account


@router.put(
    "/{account_id}",
    response_model=AccountResponse,
    responses={
        400: {"description": "Invalid field value", "model": ErrorResponse},
        404: {"description": "Account not found", "model": ErrorResponse},
    },
    summary="Update account",
)
async def update_account(
    account_id: UUID,
    payload: UpdateAccountRequest,
    service: AccountService = Depends(get_account_service),
) -> AccountResponse:
    try:
        account = await service.update_account(account_id, payload)
    except ValidationException as e:
        logger.warning("Account update rejected", account_id=str(account_id), error=e.message)
        raise bad_request(e)

    if account is None:
        raise not_found("Account", account_id)
    return account


@router.delete(
    "/{account_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"description": "Account not found", "model": ErrorResponse}},
    summary="Delete account",
)
async def delete_account(
    account_id: UUID,
    service: AccountService = Depends(get_account_service),
) -> Response:
    if not await service.delete_account(account_id):
        raise not_found("Account", account_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
