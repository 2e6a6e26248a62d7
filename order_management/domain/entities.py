"""
Domain entities for orders and accounts.

Core business records reconstructed from, and destined for, the remote
Dataverse store. These entities are framework-agnostic: they know nothing
about HTTP or about the wire format of the store.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import IntEnum
from typing import Optional
from uuid import UUID

# Placeholder for timestamps the store did not return
MIN_TIMESTAMP = datetime.min.replace(tzinfo=timezone.utc)

EMPTY_ID = UUID(int=0)


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


class OrderStatus(IntEnum):
    """Order status, stored as an option-set ordinal."""

    PENDING = 0
    CONFIRMED = 1
    PROCESSING = 2
    SHIPPED = 3
    DELIVERED = 4
    CANCELLED = 5

    @property
    def display_name(self) -> str:
        """Status name as presented to API clients (e.g. ``Pending``)."""
        return self.name.capitalize()

    @classmethod
    def is_valid(cls, value: int) -> bool:
        """Check whether an ordinal is a member of the enumeration."""
        return value in {member.value for member in cls}

    @classmethod
    def names(cls) -> list[str]:
        return [member.display_name for member in cls]


class AccountStatusCode(IntEnum):
    """Account status reason codes."""

    ACTIVE = 1
    INACTIVE = 2


class AccountStateCode(IntEnum):
    """Account state codes."""

    ACTIVE = 0
    INACTIVE = 1


@dataclass
class Order:
    """
    Order record.

    The identifier is assigned by the remote store when the order is
    created and never changes afterwards.
    """

    id: UUID = EMPTY_ID
    order_number: str = ""
    customer_name: str = ""
    customer_email: str = ""
    total_amount: Decimal = Decimal("0")
    status: OrderStatus = OrderStatus.PENDING
    shipping_address: str = ""
    description: str = ""
    created_on: datetime = MIN_TIMESTAMP
    modified_on: datetime = MIN_TIMESTAMP


@dataclass
class Account:
    """
    Account record.

    ``number_of_employees`` and ``revenue`` are genuinely optional: ``None``
    means the store holds no value, which is different from zero.
    """

    id: UUID = EMPTY_ID
    name: str = ""
    account_number: str = ""
    account_rating_code: int = 0
    email_address1: str = ""
    telephone1: str = ""
    address1_line1: str = ""
    address1_city: str = ""
    address1_state_or_province: str = ""
    address1_postal_code: str = ""
    address1_country: str = ""
    website_url: str = ""
    number_of_employees: Optional[int] = None
    revenue: Optional[Decimal] = None
    description: str = ""
    status_code: int = AccountStatusCode.ACTIVE.value
    state_code: int = AccountStateCode.ACTIVE.value
    created_on: datetime = field(default=MIN_TIMESTAMP)
    modified_on: datetime = field(default=MIN_TIMESTAMP)
