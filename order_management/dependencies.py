"""
Shared dependencies for the application.

Provides dependency injection functions used across routers.
"""

from typing import Optional

from fastapi import Depends

from .infrastructure.dataverse_connection import DataverseConnection
from .repositories.account_repository import AccountRepository
from .repositories.order_repository import OrderRepository
from .services.account_service import AccountService
from .services.order_service import OrderService

# Global connection instance (set by main app)
_connection: Optional[DataverseConnection] = None


def set_dataverse_connection(connection: Optional[DataverseConnection]) -> None:
    """
    Set the global Dataverse connection.

    Called by main app during startup and shutdown.
    """
    global _connection
    _connection = connection


def get_dataverse_connection() -> DataverseConnection:
    """Get the shared connection without connecting it."""
    if _connection is None:
        raise RuntimeError("Dataverse connection not initialized")
    return _connection


async def get_connected_dataverse_connection(
    connection: DataverseConnection = Depends(get_dataverse_connection),
) -> DataverseConnection:
    """
    Get the shared connection, connecting on first use.

    A single connection attempt is made per request; failures propagate.
    """
    if not connection.is_connected:
        await connection.connect()
    return connection


async def get_order_service(
    connection: DataverseConnection = Depends(get_connected_dataverse_connection),
) -> OrderService:
    return OrderService(OrderRepository(connection))


async def get_account_service(
    connection: DataverseConnection = Depends(get_connected_dataverse_connection),
) -> AccountService:
    return AccountService(AccountRepository(connection))
