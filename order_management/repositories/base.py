"""
Repository interfaces (Abstract Base Classes).

Define the contract for order and account persistence independent of the
underlying store. A missing record is reported as an absent result
(``None``/``False``), never as an exception; every other failure is raised.
"""

from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from ..domain.entities import Account, Order, OrderStatus


class IOrderRepository(ABC):
    """Abstract repository interface for order data operations."""

    @abstractmethod
    async def get_all(self) -> List[Order]:
        """
        Get all orders.

        Returns:
            List of every order in the store
        """
        pass

    @abstractmethod
    async def get_by_id(self, order_id: UUID) -> Optional[Order]:
        """
        Get an order by identifier.

        Args:
            order_id: Order identifier

        Returns:
            Order if found, None otherwise
        """
        pass

    @abstractmethod
    async def create(self, order: Order) -> Order:
        """
        Persist a new order.

        Args:
            order: Order to create

        Returns:
            The order carrying the identifier assigned by the store
        """
        pass

    @abstractmethod
    async def update(self, order: Order) -> Optional[Order]:
        """
        Persist changes to an existing order.

        Args:
            order: Order with merged field values

        Returns:
            The updated order, or None if it no longer exists
        """
        pass

    @abstractmethod
    async def delete(self, order_id: UUID) -> bool:
        """
        Delete an order.

        Args:
            order_id: Order identifier

        Returns:
            True if deleted, False if it did not exist
        """
        pass

    @abstractmethod
    async def get_by_status(self, status: OrderStatus) -> List[Order]:
        """Get orders with the given status."""
        pass

    @abstractmethod
    async def get_by_customer_name(self, customer_name: str) -> List[Order]:
        """Get orders whose customer name contains the given text."""
        pass


class IAccountRepository(ABC):
    """Abstract repository interface for account data operations."""

    @abstractmethod
    async def get_all(self) -> List[Account]:
        pass

    @abstractmethod
    async def get_by_id(self, account_id: UUID) -> Optional[Account]:
        """Get an account by identifier, or None if it does not exist."""
        pass

    @abstractmethod
    async def create(self, account: Account) -> Account:
        pass

    @abstractmethod
    async def update(self, account: Account) -> Optional[Account]:
        """Persist changes; None if the account no longer exists."""
        pass

    @abstractmethod
    async def delete(self, account_id: UUID) -> bool:
        """Delete an account; False if it did not exist."""
        pass

    @abstractmethod
    async def get_by_name(self, name: str) -> List[Account]:
        """Get accounts whose name contains the given text."""
        pass
