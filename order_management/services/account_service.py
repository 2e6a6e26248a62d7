"""
Account business logic.

Applies creation defaults, merges sparse updates into stored accounts and
maps domain accounts to response models.
"""

from typing import List, Optional
from uuid import UUID

import structlog

from ..domain.entities import Account, AccountStateCode, AccountStatusCode, utc_now
from ..models import AccountResponse, CreateAccountRequest, UpdateAccountRequest
from ..repositories.base import IAccountRepository
from .partial_update import apply_if_provided, field_setter

logger = structlog.get_logger(__name__)

# Fields of UpdateAccountRequest merged one-to-one onto Account
MERGEABLE_ACCOUNT_FIELDS = (
    "name",
    "email_address1",
    "telephone1",
    "address1_line1",
    "address1_city",
    "address1_state_or_province",
    "address1_postal_code",
    "address1_country",
    "website_url",
    "description",
    "account_rating_code",
    "number_of_employees",
    "revenue",
    "status_code",
    "state_code",
)


def merge_account_update(account: Account, update: UpdateAccountRequest) -> Account:
    """Merge the supplied fields of ``update`` into ``account`` in place."""
    for name in MERGEABLE_ACCOUNT_FIELDS:
        apply_if_provided(getattr(update, name), field_setter(account, name))

    account.modified_on = utc_now()
    return account


def to_account_response(account: Account) -> AccountResponse:
    """Map an ``Account`` to its response model."""
    return AccountResponse(
        id=account.id,
        name=account.name,
        account_number=account.account_number,
        account_rating_code=account.account_rating_code,
        email_address1=account.email_address1,
        telephone1=account.telephone1,
        address1_line1=account.address1_line1,
        address1_city=account.address1_city,
        address1_state_or_province=account.address1_state_or_province,
        address1_postal_code=account.address1_postal_code,
        address1_country=account.address1_country,
        website_url=account.website_url,
        number_of_employees=account.number_of_employees,
        revenue=account.revenue,
        description=account.description,
        status_code=account.status_code,
        state_code=account.state_code,
        created_on=account.created_on,
        modified_on=account.modified_on,
    )


class AccountService:
    """Service for account business operations."""

    def __init__(self, account_repository: IAccountRepository):
        if account_repository is None:
            raise ValueError("account_repository must not be None")
        self.account_repository = account_repository

    async def get_all_accounts(self) -> List[AccountResponse]:
        logger.info("Getting all accounts")
        accounts = await self.account_repository.get_all()
        return [to_account_response(account) for account in accounts]

    async def get_account_by_id(self, account_id: UUID) -> Optional[AccountResponse]:
        logger.info("Getting account", account_id=str(account_id))
        account = await self.account_repository.get_by_id(account_id)
        return to_account_response(account) if account is not None else None

    async def create_account(self, request: CreateAccountRequest) -> AccountResponse:
        """
        Create an account.

        New accounts are always Active (status code 1, state code 0).
        """
        logger.info("Creating new account", account_name=request.name)

        now = utc_now()
        account = Account(
            name=request.name,
            account_number=request.account_number,
            account_rating_code=request.account_rating_code,
            email_address1=request.email_address1,
            telephone1=request.telephone1,
            address1_line1=request.address1_line1,
            address1_city=request.address1_city,
            address1_state_or_province=request.address1_state_or_province,
            address1_postal_code=request.address1_postal_code,
            address1_country=request.address1_country,
            website_url=request.website_url,
            number_of_employees=request.number_of_employees,
            revenue=request.revenue,
            description=request.description,
            status_code=AccountStatusCode.ACTIVE.value,
            state_code=AccountStateCode.ACTIVE.value,
            created_on=now,
            modified_on=now,
        )

        created = await self.account_repository.create(account)
        logger.info("Successfully created account", account_id=str(created.id))
        return to_account_response(created)

    async def update_account(
        self, account_id: UUID, request: UpdateAccountRequest
    ) -> Optional[AccountResponse]:
        """Merge a sparse update; None if the account does not exist."""
        logger.info("Updating account", account_id=str(account_id))

        existing = await self.account_repository.get_by_id(account_id)
        if existing is None:
            logger.warning("Account not found for update", account_id=str(account_id))
            return None

        merge_account_update(existing, request)

        updated = await self.account_repository.update(existing)
        if updated is None:
            logger.warning("Account not found for update", account_id=str(account_id))
            return None

        logger.info("Successfully updated account", account_id=str(account_id))
        return to_account_response(updated)

    async def delete_account(self, account_id: UUID) -> bool:
        logger.info("Deleting account", account_id=str(account_id))

        deleted = await self.account_repository.delete(account_id)
        if deleted:
            logger.info("Successfully deleted account", account_id=str(account_id))
        else:
            logger.warning("Account not found for deletion", account_id=str(account_id))
        return deleted

    async def get_accounts_by_name(self, name: str) -> List[AccountResponse]:
        logger.info("Getting accounts by name", account_name=name)
        accounts = await self.account_repository.get_by_name(name)
        return [to_account_response(account) for account in accounts]
