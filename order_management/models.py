"""
Pydantic request/response models for the order management API.

Create models carry no status or timestamp fields: those are always set by
the service. Update models are sparse; every field is optional and only
supplied fields are merged into the stored record.
"""

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer

# Amounts are held as Decimal and rendered as JSON numbers
JsonDecimal = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]

# ============================================================================
# Orders
# ============================================================================


class CreateOrderRequest(BaseModel):
    """Payload for creating an order."""

    model_config = ConfigDict(extra="ignore")

    order_number: str = Field(default="", max_length=100, description="Order number for reference")
    customer_name: str = Field(default="", max_length=200)
    customer_email: str = Field(default="", max_length=100)
    total_amount: Decimal = Field(default=Decimal("0"), ge=0, description="Total amount")
    shipping_address: str = Field(default="", max_length=1000)
    description: str = Field(default="", max_length=2000)


class UpdateOrderRequest(BaseModel):
    """Sparse payload for updating an order."""

    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    total_amount: Optional[Decimal] = Field(
        None, description="Must be greater than zero when supplied"
    )
    status: Optional[int] = Field(
        None,
        description="0=Pending, 1=Confirmed, 2=Processing, 3=Shipped, 4=Delivered, 5=Cancelled",
    )
    shipping_address: Optional[str] = None
    description: Optional[str] = None


class OrderResponse(BaseModel):
    """Order as returned to API clients."""

    id: UUID
    order_number: str
    customer_name: str
    customer_email: str
    total_amount: JsonDecimal
    status: str = Field(..., description="Status name, e.g. Pending")
    created_on: datetime
    modified_on: datetime
    shipping_address: str
    description: str

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "3f2c9a4e-1b7d-4c1e-9a55-0d6e2f1b8c47",
                "order_number": "ORD-1001",
                "customer_name": "Contoso Ltd",
                "customer_email": "orders@contoso.com",
                "total_amount": 149.90,
                "status": "Pending",
                "created_on": "2024-05-01T09:30:00Z",
                "modified_on": "2024-05-01T09:30:00Z",
                "shipping_address": "1 Main Street, Seattle",
                "description": "",
            }
        }
    )


# ============================================================================
# Accounts
# ============================================================================


class CreateAccountRequest(BaseModel):
    """Payload for creating an account."""

    model_config = ConfigDict(extra="ignore")

    name: str = Field(default="", max_length=160)
    account_number: str = Field(default="", max_length=20)
    account_rating_code: int = Field(default=1)
    email_address1: str = Field(default="", max_length=100)
    telephone1: str = Field(default="", max_length=50)
    address1_line1: str = Field(default="", max_length=250)
    address1_city: str = Field(default="", max_length=80)
    address1_state_or_province: str = Field(default="", max_length=50)
    address1_postal_code: str = Field(default="", max_length=20)
    address1_country: str = Field(default="", max_length=80)
    website_url: str = Field(default="", max_length=200)
    number_of_employees: Optional[int] = Field(None, ge=0)
    revenue: Optional[Decimal] = Field(None, ge=0)
    description: str = Field(default="", max_length=2000)


class UpdateAccountRequest(BaseModel):
    """Sparse payload for updating an account."""

    name: Optional[str] = None
    account_rating_code: Optional[int] = None
    email_address1: Optional[str] = None
    telephone1: Optional[str] = None
    address1_line1: Optional[str] = None
    address1_city: Optional[str] = None
    address1_state_or_province: Optional[str] = None
    address1_postal_code: Optional[str] = None
    address1_country: Optional[str] = None
    website_url: Optional[str] = None
    number_of_employees: Optional[int] = None
    revenue: Optional[Decimal] = None
    description: Optional[str] = None
    status_code: Optional[int] = None
    state_code: Optional[int] = None


class AccountResponse(BaseModel):
    """Account as returned to API clients."""

    id: UUID
    name: str
    account_number: str
    account_rating_code: int
    email_address1: str
    telephone1: str
    address1_line1: str
    address1_city: str
    address1_state_or_province: str
    address1_postal_code: str
    address1_country: str
    website_url: str
    number_of_employees: Optional[int] = None
    revenue: Optional[JsonDecimal] = None
    description: str
    status_code: int
    state_code: int
    created_on: datetime
    modified_on: datetime


# ============================================================================
# Shared
# ============================================================================


class ErrorResponse(BaseModel):
    """Error response model."""

    success: bool = False
    error: str
    message: str
    details: dict = {}
