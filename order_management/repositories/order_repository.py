"""
Dataverse-backed order repository.

Orders live in the custom ``cr_order`` table. ``cr_totalamount`` is a
currency column and ``cr_status`` a choice column holding the
``OrderStatus`` ordinal.
"""

from enum import Enum
from typing import List, Optional
from uuid import UUID

import structlog

from ..domain.entities import EMPTY_ID, Order, OrderStatus, utc_now
from ..infrastructure.dataverse_client import (
    CREATED_ON,
    MODIFIED_ON,
    ConditionOperator,
    Entity,
    EntitySchema,
    Money,
    OptionSetValue,
    QueryExpression,
    RecordNotFoundError,
)
from ..infrastructure.dataverse_connection import DataverseConnection
from .base import IOrderRepository
from .filters import contains_pattern
from .mapping import read_decimal, read_int, read_text, read_timestamp

logger = structlog.get_logger(__name__)


class OrderField(str, Enum):
    """Attribute logical names of the ``cr_order`` table."""

    ID = "cr_orderid"
    ORDER_NUMBER = "cr_ordernumber"
    CUSTOMER_NAME = "cr_customername"
    CUSTOMER_EMAIL = "cr_customeremail"
    TOTAL_AMOUNT = "cr_totalamount"
    STATUS = "cr_status"
    SHIPPING_ADDRESS = "cr_shippingaddress"
    DESCRIPTION = "cr_description"


ORDER_SCHEMA = EntitySchema(
    logical_name="cr_order",
    entity_set="cr_orders",
    primary_id=OrderField.ID.value,
    money_fields=frozenset({OrderField.TOTAL_AMOUNT.value}),
    option_set_fields=frozenset({OrderField.STATUS.value}),
)


def _read_status(entity: Entity) -> OrderStatus:
    ordinal = read_int(entity, OrderField.STATUS)
    if not OrderStatus.is_valid(ordinal):
        logger.warning("Unknown order status ordinal", order_id=str(entity.id), status=ordinal)
        return OrderStatus.PENDING
    return OrderStatus(ordinal)


def map_to_order(entity: Entity) -> Order:
    """Map a Dataverse entity to an ``Order``."""
    return Order(
        id=entity.id or EMPTY_ID,
        order_number=read_text(entity, OrderField.ORDER_NUMBER),
        customer_name=read_text(entity, OrderField.CUSTOMER_NAME),
        customer_email=read_text(entity, OrderField.CUSTOMER_EMAIL),
        total_amount=read_decimal(entity, OrderField.TOTAL_AMOUNT),
        status=_read_status(entity),
        shipping_address=read_text(entity, OrderField.SHIPPING_ADDRESS),
        description=read_text(entity, OrderField.DESCRIPTION),
        created_on=read_timestamp(entity, CREATED_ON),
        modified_on=read_timestamp(entity, MODIFIED_ON),
    )


def map_to_entity(order: Order) -> Entity:
    """Map an ``Order`` to a Dataverse entity (identifier not included)."""
    entity = Entity(schema=ORDER_SCHEMA)

    entity[OrderField.ORDER_NUMBER] = order.order_number
    entity[OrderField.CUSTOMER_NAME] = order.customer_name
    entity[OrderField.CUSTOMER_EMAIL] = order.customer_email
    entity[OrderField.TOTAL_AMOUNT] = Money(order.total_amount)
    entity[OrderField.STATUS] = OptionSetValue(int(order.status))
    entity[OrderField.SHIPPING_ADDRESS] = order.shipping_address
    entity[OrderField.DESCRIPTION] = order.description

    return entity


class OrderRepository(IOrderRepository):
    """Repository for order CRUD operations against Dataverse."""

    def __init__(self, connection: DataverseConnection):
        if connection is None:
            raise ValueError("connection must not be None")
        self.connection = connection

    async def _query(self, query: QueryExpression) -> List[Order]:
        entities = await self.connection.client.retrieve_multiple(query)
        return [map_to_order(entity) for entity in entities]

    async def get_all(self) -> List[Order]:
        logger.info("Retrieving all orders from Dataverse")
        try:
            return await self._query(QueryExpression(ORDER_SCHEMA))
        except Exception as e:
            logger.error("Error retrieving orders from Dataverse", error=str(e), exc_info=True)
            raise

    async def get_by_id(self, order_id: UUID) -> Optional[Order]:
        logger.info("Retrieving order from Dataverse", order_id=str(order_id))
        try:
            entity = await self.connection.client.retrieve(ORDER_SCHEMA, order_id)
        except RecordNotFoundError:
            logger.info("Order not found in Dataverse", order_id=str(order_id))
            return None
        except Exception as e:
            logger.error(
                "Error retrieving order from Dataverse",
                order_id=str(order_id),
                error=str(e),
                exc_info=True,
            )
            raise
        return map_to_order(entity)

    async def create(self, order: Order) -> Order:
        logger.info("Creating new order in Dataverse", order_number=order.order_number)
        try:
            new_id = await self.connection.client.create(map_to_entity(order))
        except Exception as e:
            logger.error("Error creating order in Dataverse", error=str(e), exc_info=True)
            raise

        now = utc_now()
        order.id = new_id
        order.created_on = now
        order.modified_on = now

        logger.info("Successfully created order in Dataverse", order_id=str(new_id))
        return order

    async def update(self, order: Order) -> Optional[Order]:
        logger.info("Updating order in Dataverse", order_id=str(order.id))
        entity = map_to_entity(order)
        entity.id = order.id
        try:
            await self.connection.client.update(entity)
        except RecordNotFoundError:
            logger.warning("Order disappeared before update", order_id=str(order.id))
            return None
        except Exception as e:
            logger.error(
                "Error updating order in Dataverse",
                order_id=str(order.id),
                error=str(e),
                exc_info=True,
            )
            raise

        order.modified_on = utc_now()
        logger.info("Successfully updated order in Dataverse", order_id=str(order.id))
        return order

    async def delete(self, order_id: UUID) -> bool:
        logger.info("Deleting order from Dataverse", order_id=str(order_id))
        try:
            await self.connection.client.delete(ORDER_SCHEMA, order_id)
        except RecordNotFoundError:
            logger.info("Order not found for deletion", order_id=str(order_id))
            return False
        except Exception as e:
            logger.error(
                "Error deleting order from Dataverse",
                order_id=str(order_id),
                error=str(e),
                exc_info=True,
            )
            raise

        logger.info("Successfully deleted order from Dataverse", order_id=str(order_id))
        return True

    async def get_by_status(self, status: OrderStatus) -> List[Order]:
        logger.info("Retrieving orders by status from Dataverse", status=status.display_name)
        query = QueryExpression(ORDER_SCHEMA).add_condition(
            OrderField.STATUS, ConditionOperator.EQUAL, int(status)
        )
        try:
            return await self._query(query)
        except Exception as e:
            logger.error(
                "Error retrieving orders by status from Dataverse",
                status=status.display_name,
                error=str(e),
                exc_info=True,
            )
            raise

    async def get_by_customer_name(self, customer_name: str) -> List[Order]:
        logger.info(
            "Retrieving orders for customer from Dataverse", customer_name=customer_name
        )
        query = QueryExpression(ORDER_SCHEMA).add_condition(
            OrderField.CUSTOMER_NAME,
            ConditionOperator.LIKE,
            contains_pattern(customer_name),
        )
        try:
            return await self._query(query)
        except Exception as e:
            logger.error(
                "Error retrieving orders by customer name from Dataverse",
                customer_name=customer_name,
                error=str(e),
                exc_info=True,
            )
            raise
