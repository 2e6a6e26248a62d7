"""
Shared test fixtures.
"""

from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock
from uuid import UUID

import pytest

from order_management.domain.entities import Account, Order, OrderStatus

ORDER_ID = UUID("3f2c9a4e-1b7d-4c1e-9a55-0d6e2f1b8c47")
ACCOUNT_ID = UUID("a1b2c3d4-0000-4000-8000-000000000001")
CREATED = datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def sample_order():
    """Create a stored order for testing."""
    return Order(
        id=ORDER_ID,
        order_number="ORD-1001",
        customer_name="Contoso Ltd",
        customer_email="orders@contoso.com",
        total_amount=Decimal("149.90"),
        status=OrderStatus.CONFIRMED,
        shipping_address="1 Main Street, Seattle",
        description="First order",
        created_on=CREATED,
        modified_on=CREATED,
    )


@pytest.fixture
def sample_account():
    """Create a stored account for testing."""
    return Account(
        id=ACCOUNT_ID,
        name="Fabrikam",
        account_number="ACC-42",
        account_rating_code=1,
        email_address1="info@fabrikam.com",
        telephone1="555-0100",
        address1_line1="10 Harbour Road",
        address1_city="Redmond",
        address1_state_or_province="WA",
        address1_postal_code="98052",
        address1_country="USA",
        website_url="https://fabrikam.com",
        number_of_employees=250,
        revenue=Decimal("1000000.00"),
        description="Key account",
        status_code=1,
        state_code=0,
        created_on=CREATED,
        modified_on=CREATED,
    )


@pytest.fixture
def mock_client():
    """Create mock Dataverse client."""
    return AsyncMock()


@pytest.fixture
def mock_connection(mock_client):
    """Create mock connection exposing the mock client."""
    connection = MagicMock()
    connection.is_connected = True
    connection.client = mock_client
    return connection
