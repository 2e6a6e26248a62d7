"""
Dataverse-backed account repository.

Accounts live in the standard ``account`` table. ``revenue`` is a currency
column; rating, status and state codes are read and written as plain
integers.
"""

from enum import Enum
from typing import List, Optional
from uuid import UUID

import structlog

from ..domain.entities import EMPTY_ID, Account, utc_now
from ..infrastructure.dataverse_client import (
    CREATED_ON,
    MODIFIED_ON,
    ConditionOperator,
    Entity,
    EntitySchema,
    Money,
    QueryExpression,
    RecordNotFoundError,
)
from ..infrastructure.dataverse_connection import DataverseConnection
from .base import IAccountRepository
from .filters import contains_pattern
from .mapping import (
    read_int,
    read_optional_decimal,
    read_optional_int,
    read_text,
    read_timestamp,
)

logger = structlog.get_logger(__name__)


class AccountField(str, Enum):
    """Attribute logical names of the ``account`` table."""

    ID = "accountid"
    NAME = "name"
    ACCOUNT_NUMBER = "accountnumber"
    ACCOUNT_RATING_CODE = "accountratingcode"
    EMAIL_ADDRESS1 = "emailaddress1"
    TELEPHONE1 = "telephone1"
    ADDRESS1_LINE1 = "address1_line1"
    ADDRESS1_CITY = "address1_city"
    ADDRESS1_STATE_OR_PROVINCE = "address1_stateorprovince"
    ADDRESS1_POSTAL_CODE = "address1_postalcode"
    ADDRESS1_COUNTRY = "address1_country"
    WEBSITE_URL = "websiteurl"
    NUMBER_OF_EMPLOYEES = "numberofemployees"
    REVENUE = "revenue"
    DESCRIPTION = "description"
    STATUS_CODE = "statuscode"
    STATE_CODE = "statecode"


ACCOUNT_SCHEMA = EntitySchema(
    logical_name="account",
    entity_set="accounts",
    primary_id=AccountField.ID.value,
    money_fields=frozenset({AccountField.REVENUE.value}),
)

# Columns requested on every account read
ACCOUNT_COLUMNS = tuple(f.value for f in AccountField) + (CREATED_ON, MODIFIED_ON)


def map_to_account(entity: Entity) -> Account:
    """Map a Dataverse entity to an ``Account``."""
    return Account(
        id=entity.id or EMPTY_ID,
        name=read_text(entity, AccountField.NAME),
        account_number=read_text(entity, AccountField.ACCOUNT_NUMBER),
        account_rating_code=read_int(entity, AccountField.ACCOUNT_RATING_CODE),
        email_address1=read_text(entity, AccountField.EMAIL_ADDRESS1),
        telephone1=read_text(entity, AccountField.TELEPHONE1),
        address1_line1=read_text(entity, AccountField.ADDRESS1_LINE1),
        address1_city=read_text(entity, AccountField.ADDRESS1_CITY),
        address1_state_or_province=read_text(
            entity, AccountField.ADDRESS1_STATE_OR_PROVINCE
        ),
        address1_postal_code=read_text(entity, AccountField.ADDRESS1_POSTAL_CODE),
        address1_country=read_text(entity, AccountField.ADDRESS1_COUNTRY),
        website_url=read_text(entity, AccountField.WEBSITE_URL),
        number_of_employees=read_optional_int(entity, AccountField.NUMBER_OF_EMPLOYEES),
        revenue=read_optional_decimal(entity, AccountField.REVENUE),
        description=read_text(entity, AccountField.DESCRIPTION),
        status_code=read_int(entity, AccountField.STATUS_CODE),
        state_code=read_int(entity, AccountField.STATE_CODE),
        created_on=read_timestamp(entity, CREATED_ON),
        modified_on=read_timestamp(entity, MODIFIED_ON),
    )


def map_to_entity(account: Account) -> Entity:
    """
    Map an ``Account`` to a Dataverse entity (identifier not included).

    Employee count and revenue are only written when present so the store
    keeps its own value instead of receiving an artificial zero.
    """
    entity = Entity(schema=ACCOUNT_SCHEMA)

    entity[AccountField.NAME] = account.name
    entity[AccountField.ACCOUNT_NUMBER] = account.account_number
    entity[AccountField.ACCOUNT_RATING_CODE] = account.account_rating_code
    entity[AccountField.EMAIL_ADDRESS1] = account.email_address1
    entity[AccountField.TELEPHONE1] = account.telephone1
    entity[AccountField.ADDRESS1_LINE1] = account.address1_line1
    entity[AccountField.ADDRESS1_CITY] = account.address1_city
    entity[AccountField.ADDRESS1_STATE_OR_PROVINCE] = account.address1_state_or_province
    entity[AccountField.ADDRESS1_POSTAL_CODE] = account.address1_postal_code
    entity[AccountField.ADDRESS1_COUNTRY] = account.address1_country
    entity[AccountField.WEBSITE_URL] = account.website_url

    if account.number_of_employees is not None:
        entity[AccountField.NUMBER_OF_EMPLOYEES] = account.number_of_employees

    if account.revenue is not None:
        entity[AccountField.REVENUE] = Money(account.revenue)

    entity[AccountField.DESCRIPTION] = account.description
    entity[AccountField.STATUS_CODE] = account.status_code
    entity[AccountField.STATE_CODE] = account.state_code

    return entity


class AccountRepository(IAccountRepository):
    """Repository for account CRUD operations against Dataverse."""

    def __init__(self, connection: DataverseConnection):
        if connection is None:
            raise ValueError("connection must not be None")
        self.connection = connection

    async def _query(self, query: QueryExpression) -> List[Account]:
        entities = await self.connection.client.retrieve_multiple(query)
        return [map_to_account(entity) for entity in entities]

    async def get_all(self) -> List[Account]:
        logger.info("Retrieving all accounts from Dataverse")
        try:
            return await self._query(QueryExpression(ACCOUNT_SCHEMA, columns=ACCOUNT_COLUMNS))
        except Exception as e:
            logger.error("Error retrieving accounts from Dataverse", error=str(e), exc_info=True)
            raise

    async def get_by_id(self, account_id: UUID) -> Optional[Account]:
        logger.info("Retrieving account from Dataverse", account_id=str(account_id))
        try:
            entity = await self.connection.client.retrieve(
                ACCOUNT_SCHEMA, account_id, ACCOUNT_COLUMNS
            )
        except RecordNotFoundError:
            logger.info("Account not found in Dataverse", account_id=str(account_id))
            return None
        except Exception as e:
            logger.error(
                "Error retrieving account from Dataverse",
                account_id=str(account_id),
                error=str(e),
                exc_info=True,
            )
            raise
        return map_to_account(entity)

    async def create(self, account: Account) -> Account:
        logger.info("Creating new account in Dataverse", account_name=account.name)
        try:
            new_id = await self.connection.client.create(map_to_entity(account))
        except Exception as e:
            logger.error("Error creating account in Dataverse", error=str(e), exc_info=True)
            raise

        now = utc_now()
        account.id = new_id
        account.created_on = now
        account.modified_on = now

        logger.info("Successfully created account in Dataverse", account_id=str(new_id))
        return account

    async def update(self, account: Account) -> Optional[Account]:
        logger.info("Updating account in Dataverse", account_id=str(account.id))
        entity = map_to_entity(account)
        entity.id = account.id
        try:
            await self.connection.client.update(entity)
        except RecordNotFoundError:
            logger.warning("Account disappeared before update", account_id=str(account.id))
            return None
        except Exception as e:
            logger.error(
                "Error updating account in Dataverse",
                account_id=str(account.id),
                error=str(e),
                exc_info=True,
            )
            raise

        account.modified_on = utc_now()
        logger.info("Successfully updated account in Dataverse", account_id=str(account.id))
        return account

    async def delete(self, account_id: UUID) -> bool:
        logger.info("Deleting account from Dataverse", account_id=str(account_id))
        try:
            await self.connection.client.delete(ACCOUNT_SCHEMA, account_id)
        except RecordNotFoundError:
            logger.info("Account not found for deletion", account_id=str(account_id))
            return False
        except Exception as e:
            logger.error(
                "Error deleting account from Dataverse",
                account_id=str(account_id),
                error=str(e),
                exc_info=True,
            )
            raise

        logger.info("Successfully deleted account from Dataverse", account_id=str(account_id))
        return True

    async def get_by_name(self, name: str) -> List[Account]:
        logger.info("Retrieving accounts by name from Dataverse", account_name=name)
        query = QueryExpression(ACCOUNT_SCHEMA, columns=ACCOUNT_COLUMNS).add_condition(
            AccountField.NAME, ConditionOperator.LIKE, contains_pattern(name)
        )
        try:
            return await self._query(query)
        except Exception as e:
            logger.error(
                "Error retrieving accounts by name from Dataverse",
                account_name=name,
                error=str(e),
                exc_info=True,
            )
            raise
