"""
Tests for Dataverse-backed repositories.

Covers:
- Query construction
- Not-found mapping to absent results
- Failure propagation
- Identifier and timestamp assignment on create
"""

from uuid import UUID

import pytest

from order_management.domain.entities import EMPTY_ID, MIN_TIMESTAMP, Order, OrderStatus
from order_management.infrastructure.dataverse_client import (
    ConditionOperator,
    DataverseError,
    Entity,
    OptionSetValue,
    RecordNotFoundError,
)
from order_management.repositories.account_repository import (
    ACCOUNT_COLUMNS,
    ACCOUNT_SCHEMA,
    AccountRepository,
)
from order_management.repositories.order_repository import (
    ORDER_SCHEMA,
    OrderField,
    OrderRepository,
)

NEW_ID = UUID("11111111-2222-4333-8444-555555555555")


@pytest.fixture
def order_repository(mock_connection):
    return OrderRepository(mock_connection)


@pytest.fixture
def account_repository(mock_connection):
    return AccountRepository(mock_connection)


def order_entity(record_id: UUID, status: int = 0) -> Entity:
    entity = Entity(schema=ORDER_SCHEMA, id=record_id)
    entity[OrderField.ORDER_NUMBER] = "ORD-9"
    entity[OrderField.STATUS] = OptionSetValue(status)
    return entity


class TestOrderRepository:
    """Test order repository behaviour."""

    def test_none_connection_rejected(self):
        with pytest.raises(ValueError):
            OrderRepository(None)

    @pytest.mark.asyncio
    async def test_get_all(self, order_repository, mock_client):
        mock_client.retrieve_multiple.return_value = [order_entity(NEW_ID)]

        orders = await order_repository.get_all()

        assert [o.order_number for o in orders] == ["ORD-9"]
        query = mock_client.retrieve_multiple.await_args.args[0]
        assert query.schema is ORDER_SCHEMA
        assert query.conditions == []

    @pytest.mark.asyncio
    async def test_get_by_id(self, order_repository, mock_client):
        mock_client.retrieve.return_value = order_entity(NEW_ID, status=2)

        order = await order_repository.get_by_id(NEW_ID)

        assert order.id == NEW_ID
        assert order.status == OrderStatus.PROCESSING

    @pytest.mark.asyncio
    async def test_get_by_id_not_found(self, order_repository, mock_client):
        mock_client.retrieve.side_effect = RecordNotFoundError("cr_orders", NEW_ID)

        assert await order_repository.get_by_id(NEW_ID) is None

    @pytest.mark.asyncio
    async def test_get_by_id_failure_propagates(self, order_repository, mock_client):
        mock_client.retrieve.side_effect = DataverseError("boom", status_code=500)

        with pytest.raises(DataverseError):
            await order_repository.get_by_id(NEW_ID)

    @pytest.mark.asyncio
    async def test_create_assigns_id_and_timestamps(self, order_repository, mock_client):
        mock_client.create.return_value = NEW_ID
        order = Order(order_number="ORD-10")

        created = await order_repository.create(order)

        assert created.id == NEW_ID
        assert created.created_on > MIN_TIMESTAMP
        assert created.modified_on == created.created_on
        entity = mock_client.create.await_args.args[0]
        assert entity.id is None

    @pytest.mark.asyncio
    async def test_update_sends_id(self, order_repository, mock_client, sample_order):
        before = sample_order.modified_on

        updated = await order_repository.update(sample_order)

        entity = mock_client.update.await_args.args[0]
        assert entity.id == sample_order.id
        assert updated.modified_on > before

    @pytest.mark.asyncio
    async def test_update_not_found(self, order_repository, mock_client, sample_order):
        mock_client.update.side_effect = RecordNotFoundError("cr_orders", sample_order.id)

        assert await order_repository.update(sample_order) is None

    @pytest.mark.asyncio
    async def test_delete(self, order_repository, mock_client):
        assert await order_repository.delete(NEW_ID) is True
        mock_client.delete.assert_awaited_once_with(ORDER_SCHEMA, NEW_ID)

    @pytest.mark.asyncio
    async def test_delete_not_found(self, order_repository, mock_client):
        mock_client.delete.side_effect = RecordNotFoundError("cr_orders", NEW_ID)

        assert await order_repository.delete(NEW_ID) is False

    @pytest.mark.asyncio
    async def test_delete_failure_propagates(self, order_repository, mock_client):
        mock_client.delete.side_effect = DataverseError("forbidden", status_code=403)

        with pytest.raises(DataverseError):
            await order_repository.delete(NEW_ID)

    @pytest.mark.asyncio
    async def test_get_by_status_filters_on_ordinal(self, order_repository, mock_client):
        mock_client.retrieve_multiple.return_value = []

        await order_repository.get_by_status(OrderStatus.SHIPPED)

        condition = mock_client.retrieve_multiple.await_args.args[0].conditions[0]
        assert condition.attribute == "cr_status"
        assert condition.operator == ConditionOperator.EQUAL
        assert condition.value == 3

    @pytest.mark.asyncio
    async def test_get_by_customer_name_sanitises(self, order_repository, mock_client):
        mock_client.retrieve_multiple.return_value = []

        await order_repository.get_by_customer_name("Contoso%Ltd")

        condition = mock_client.retrieve_multiple.await_args.args[0].conditions[0]
        assert condition.attribute == "cr_customername"
        assert condition.operator == ConditionOperator.LIKE
        assert condition.value == "%Contoso[%]Ltd%"

    @pytest.mark.asyncio
    async def test_query_failure_propagates(self, order_repository, mock_client):
        mock_client.retrieve_multiple.side_effect = DataverseError("timeout")

        with pytest.raises(DataverseError):
            await order_repository.get_all()


class TestAccountRepository:
    """Test account repository behaviour."""

    @pytest.mark.asyncio
    async def test_get_all_selects_columns(self, account_repository, mock_client):
        mock_client.retrieve_multiple.return_value = []

        assert await account_repository.get_all() == []

        query = mock_client.retrieve_multiple.await_args.args[0]
        assert query.schema is ACCOUNT_SCHEMA
        assert query.columns == ACCOUNT_COLUMNS

    @pytest.mark.asyncio
    async def test_get_by_id_not_found(self, account_repository, mock_client):
        mock_client.retrieve.side_effect = RecordNotFoundError("accounts", NEW_ID)

        assert await account_repository.get_by_id(NEW_ID) is None

    @pytest.mark.asyncio
    async def test_create_assigns_id(self, account_repository, mock_client, sample_account):
        mock_client.create.return_value = NEW_ID
        sample_account.id = EMPTY_ID

        created = await account_repository.create(sample_account)

        assert created.id == NEW_ID

    @pytest.mark.asyncio
    async def test_update_not_found(self, account_repository, mock_client, sample_account):
        mock_client.update.side_effect = RecordNotFoundError("accounts", sample_account.id)

        assert await account_repository.update(sample_account) is None

    @pytest.mark.asyncio
    async def test_delete_not_found(self, account_repository, mock_client):
        mock_client.delete.side_effect = RecordNotFoundError("accounts", NEW_ID)

        assert await account_repository.delete(NEW_ID) is False

    @pytest.mark.asyncio
    async def test_get_by_name_sanitises(self, account_repository, mock_client):
        mock_client.retrieve_multiple.return_value = []

        await account_repository.get_by_name("Adventure[Works]")

        condition = mock_client.retrieve_multiple.await_args.args[0].conditions[0]
        assert condition.attribute == "name"
        assert condition.value == "%Adventure[[]Works]%"
