"""
Order business logic.

Applies creation defaults, merges sparse updates into stored orders and
maps domain orders to response models.
"""

from decimal import Decimal
from typing import List, Optional
from uuid import UUID

import structlog

from ..domain.entities import Order, OrderStatus, utc_now
from ..domain.exceptions import ValidationException
from ..models import CreateOrderRequest, OrderResponse, UpdateOrderRequest
from ..repositories.base import IOrderRepository
from .partial_update import apply_if_provided, field_setter

logger = structlog.get_logger(__name__)


def merge_order_update(order: Order, update: UpdateOrderRequest) -> Order:
    """
    Merge the supplied fields of ``update`` into ``order`` in place.

    Fields are applied one after another. If the amount or status fails
    validation, fields applied before it stay applied on ``order``; callers
    must discard the record rather than persist it.

    Raises:
        ValidationException: If total_amount <= 0 or status is not a valid
            ``OrderStatus`` ordinal
    """
    apply_if_provided(update.customer_name, field_setter(order, "customer_name"))
    apply_if_provided(update.customer_email, field_setter(order, "customer_email"))
    apply_if_provided(update.shipping_address, field_setter(order, "shipping_address"))
    apply_if_provided(update.description, field_setter(order, "description"))

    def set_total_amount(value: Decimal) -> None:
        if value <= 0:
            raise ValidationException(
                "total_amount", value, "TotalAmount must be greater than zero"
            )
        order.total_amount = value

    def set_status(value: int) -> None:
        if not OrderStatus.is_valid(value):
            raise ValidationException("status", value, f"Invalid status value: {value}")
        order.status = OrderStatus(value)

    apply_if_provided(update.total_amount, set_total_amount)
    apply_if_provided(update.status, set_status)

    order.modified_on = utc_now()
    return order


def to_order_response(order: Order) -> OrderResponse:
    """Map an ``Order`` to its response model."""
    return OrderResponse(
        id=order.id,
        order_number=order.order_number,
        customer_name=order.customer_name,
        customer_email=order.customer_email,
        total_amount=order.total_amount,
        status=order.status.display_name,
        created_on=order.created_on,
        modified_on=order.modified_on,
        shipping_address=order.shipping_address,
        description=order.description,
    )


class OrderService:
    """Service for order business operations."""

    def __init__(self, order_repository: IOrderRepository):
        if order_repository is None:
            raise ValueError("order_repository must not be None")
        self.order_repository = order_repository

    async def get_all_orders(self) -> List[OrderResponse]:
        logger.info("Getting all orders")
        orders = await self.order_repository.get_all()
        return [to_order_response(order) for order in orders]

    async def get_order_by_id(self, order_id: UUID) -> Optional[OrderResponse]:
        logger.info("Getting order", order_id=str(order_id))
        order = await self.order_repository.get_by_id(order_id)
        return to_order_response(order) if order is not None else None

    async def create_order(self, request: CreateOrderRequest) -> OrderResponse:
        """
        Create an order.

        Status is always Pending on creation; identifier and timestamps are
        assigned when the record is stored.
        """
        logger.info("Creating new order", order_number=request.order_number)

        now = utc_now()
        order = Order(
            order_number=request.order_number,
            customer_name=request.customer_name,
            customer_email=request.customer_email,
            total_amount=request.total_amount,
            shipping_address=request.shipping_address,
            description=request.description,
            status=OrderStatus.PENDING,
            created_on=now,
            modified_on=now,
        )

        created = await self.order_repository.create(order)
        logger.info("Successfully created order", order_id=str(created.id))
        return to_order_response(created)

    async def update_order(
        self, order_id: UUID, request: UpdateOrderRequest
    ) -> Optional[OrderResponse]:
        """
        Merge a sparse update into an existing order.

        Returns:
            The updated order, or None if the order does not exist

        Raises:
            ValidationException: If a supplied field is invalid; the
                repository is not called in that case
        """
        logger.info("Updating order", order_id=str(order_id))

        existing = await self.order_repository.get_by_id(order_id)
        if existing is None:
            logger.warning("Order not found for update", order_id=str(order_id))
            return None

        merge_order_update(existing, request)

        updated = await self.order_repository.update(existing)
        if updated is None:
            logger.warning("Order not found for update", order_id=str(order_id))
            return None

        logger.info("Successfully updated order", order_id=str(order_id))
        return to_order_response(updated)

    async def delete_order(self, order_id: UUID) -> bool:
        logger.info("Deleting order", order_id=str(order_id))

        deleted = await self.order_repository.delete(order_id)
        if deleted:
            logger.info("Successfully deleted order", order_id=str(order_id))
        else:
            logger.warning("Order not found for deletion", order_id=str(order_id))
        return deleted

    async def get_orders_by_status(self, status: OrderStatus) -> List[OrderResponse]:
        logger.info("Getting orders by status", status=status.display_name)
        orders = await self.order_repository.get_by_status(status)
        return [to_order_response(order) for order in orders]

    async def get_orders_by_customer_name(self, customer_name: str) -> List[OrderResponse]:
        logger.info("Getting orders for customer", customer_name=customer_name)
        orders = await self.order_repository.get_by_customer_name(customer_name)
        return [to_order_response(order) for order in orders]
