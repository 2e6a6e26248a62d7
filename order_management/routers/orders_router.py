"""
Order endpoints.

CRUD over orders plus lookups by status ordinal and by customer name.
"""

from typing import List
from uuid import UUID

import structlog
from fastapi import APIRouter, Depends, Request, Response, status

from ..dependencies import get_order_service
from ..domain.entities import OrderStatus
from ..domain.exceptions import ValidationException
from ..models import CreateOrderRequest, ErrorResponse, OrderResponse, UpdateOrderRequest
from ..services.order_service import OrderService
from .errors import bad_request, not_found

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/Orders", tags=["orders"])


@router.get(
    "",
    response_model=List[OrderResponse],
    summary="List orders",
)
async def get_all_orders(
    service: OrderService = Depends(get_order_service),
) -> List[OrderResponse]:
    return await service.get_all_orders()


@router.get(
    "/customer/{customer_name}",
    response_model=List[OrderResponse],
    responses={400: {"description": "Empty customer name", "model": ErrorResponse}},
    summary="Find orders by customer name",
    description="Case-insensitive substring match; wildcard characters are matched literally.",
)
async def get_orders_by_customer(
    customer_name: str,
    service: OrderService = Depends(get_order_service),
) -> List[OrderResponse]:
    if not customer_name.strip():
        raise bad_request(
            ValidationException("customer_name", customer_name, "Customer name is required")
        )
    return await service.get_orders_by_customer_name(customer_name)


@router.get(
    "/status/{order_status}",
    response_model=List[OrderResponse],
    responses={400: {"description": "Unknown status value", "model": ErrorResponse}},
    summary="Find orders by status",
    description="Status is the ordinal: 0=Pending, 1=Confirmed, 2=Processing, "
    "3=Shipped, 4=Delivered, 5=Cancelled.",
)
async def get_orders_by_status(
    order_status: int,
    service: OrderService = Depends(get_order_service),
) -> List[OrderResponse]:
    if not OrderStatus.is_valid(order_status):
        raise bad_request(
            ValidationException(
                "status",
                order_status,
                f"Invalid status value. Valid values are: {', '.join(OrderStatus.names())}",
            )
        )
    return await service.get_orders_by_status(OrderStatus(order_status))


@router.get(
    "/{order_id}",
    response_model=OrderResponse,
    responses={404: {"description": "Order not found", "model": ErrorResponse}},
    summary="Get order",
)
async def get_order_by_id(
    order_id: UUID,
    service: OrderService = Depends(get_order_service),
) -> OrderResponse:
    order = await service.get_order_by_id(order_id)
    if order is None:
        raise not_found("Order", order_id)
    return order


@router.post(
    "",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create order",
    description="New orders always start in the Pending status.",
)
async def create_order(
    payload: CreateOrderRequest,
    request: Request,
    response: Response,
    service: OrderService = Depends(get_order_service),
) -> OrderResponse:
    order = await service.create_order(payload)
    response.headers["Location"] = str(request.url_for("get_order_by_id", order_id=order.id))
    logger.info("Order created", order_id=str(order.id))
    return order


@router.put(
    "/{order_id}",
    response_model=OrderResponse,
    responses={
        400: {"description": "Invalid field value", "model": ErrorResponse},
        404: {"description": "Order not found", "model": ErrorResponse},
    },
    summary="Update order",
    description="Only supplied fields are changed. Empty strings leave text fields untouched.",
)
async def update_order(
    order_id: UUID,
    payload: UpdateOrderRequest,
    service: OrderService = Depends(get_order_service),
) -> OrderResponse:
    try:
        order = await service.update_order(order_id, payload)
    except ValidationException as e:
        logger.warning("Order update rejected", order_id=str(order_id), error=e.message)
        raise bad_request(e)

    if order is None:
        raise not_found("Order", order_id)
    return order


@router.delete(
    "/{order_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"description": "Order not found", "model": ErrorResponse}},
    summary="Delete order",
)
async def delete_order(
    order_id: UUID,
    service: OrderService = Depends(get_order_service),
) -> Response:
    if not await service.delete_order(order_id):
        raise not_found("Order", order_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
