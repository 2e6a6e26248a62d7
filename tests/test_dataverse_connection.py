"""
Tests for Dataverse connection lifecycle.
"""

import asyncio
from unittest.mock import patch

import httpx
import pytest

from order_management.config import Settings
from order_management.domain.exceptions import (
    ConfigurationException,
    ConnectionNotEstablishedException,
    ExternalServiceException,
)
from order_management.infrastructure.dataverse_client import DataverseClient
from order_management.infrastructure.dataverse_connection import (
    DataverseConnection,
    DataverseSettings,
)

VALID_SETTINGS = DataverseSettings(
    url="https://contoso.crm.dynamics.com",
    client_id="client",
    client_secret="secret",
    tenant_id="tenant",
)


def make_transport(who_am_i_status: int = 200):
    calls = {"who_am_i": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/oauth2/v2.0/token"):
            return httpx.Response(200, json={"access_token": "t", "expires_in": 3600})
        calls["who_am_i"] += 1
        if who_am_i_status != 200:
            return httpx.Response(who_am_i_status, json={"error": {"message": "denied"}})
        return httpx.Response(200, json={"UserId": "u-1", "OrganizationId": "o-1"})

    return httpx.MockTransport(handler), calls


class TestDataverseSettings:
    """Test settings construction and validation."""

    def test_from_settings(self):
        settings = Settings(
            DATAVERSE_URL="https://org.crm.dynamics.com",
            DATAVERSE_CLIENT_ID="id",
            DATAVERSE_CLIENT_SECRET="secret",
            DATAVERSE_TENANT_ID="tenant",
            DATAVERSE_API_VERSION="v9.1",
        )

        dataverse = DataverseSettings.from_settings(settings)

        assert dataverse.url == "https://org.crm.dynamics.com"
        assert dataverse.api_version == "v9.1"
        dataverse.validate()

    @pytest.mark.parametrize(
        "missing, setting",
        [
            ("url", "DATAVERSE_URL"),
            ("client_id", "DATAVERSE_CLIENT_ID"),
            ("client_secret", "DATAVERSE_CLIENT_SECRET"),
            ("tenant_id", "DATAVERSE_TENANT_ID"),
        ],
    )
    def test_missing_value_rejected(self, missing, setting):
        values = {
            "url": VALID_SETTINGS.url,
            "client_id": VALID_SETTINGS.client_id,
            "client_secret": VALID_SETTINGS.client_secret,
            "tenant_id": VALID_SETTINGS.tenant_id,
        }
        values[missing] = ""

        with pytest.raises(ConfigurationException) as exc_info:
            DataverseSettings(**values).validate()

        assert exc_info.value.details["setting"] == setting


class TestDataverseConnection:
    """Test connect/close lifecycle."""

    def test_none_settings_rejected(self):
        with pytest.raises(ValueError):
            DataverseConnection(None)

    def test_client_unavailable_before_connect(self):
        connection = DataverseConnection(VALID_SETTINGS)

        assert connection.is_connected is False
        with pytest.raises(ConnectionNotEstablishedException) as exc_info:
            _ = connection.client
        assert "Call connect() first" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_connect_probes_and_is_idempotent(self):
        transport, calls = make_transport()
        connection = DataverseConnection(VALID_SETTINGS, transport=transport)

        await connection.connect()
        await connection.connect()

        assert connection.is_connected is True
        assert connection.client is not None
        assert calls["who_am_i"] == 1
        await connection.close()


    @pytest.mark.asyncio
    async def test_concurrent_connects_share_one_client(self):
        transport, calls = make_transport()
        connection = DataverseConnection(VALID_SETTINGS, transport=transport)

        with patch(
            "order_management.infrastructure.dataverse_connection.DataverseClient",
            wraps=DataverseClient,
        ) as client_cls:
            await asyncio.gather(*(connection.connect() for _ in range(5)))

        assert client_cls.call_count == 1
        assert calls["who_am_i"] == 1
        assert connection.is_connected is True
        await connection.close()

    @pytest.mark.asyncio
    async def test_reconnects_after_client_closed(self):
        transport, calls = make_transport()
        connection = DataverseConnection(VALID_SETTINGS, transport=transport)
        await connection.connect()
        first = connection.client

        await first.close()
        await connection.connect()

        assert connection.client is not first
        assert calls["who_am_i"] == 2
        await connection.close()
    @pytest.mark.asyncio
    async def test_connect_failure_leaves_disconnected(self):
        transport, _ = make_transport(who_am_i_status=403)
        connection = DataverseConnection(VALID_SETTINGS, transport=transport)

        with pytest.raises(ExternalServiceException):
            await connection.connect()

        assert connection.is_connected is False

    @pytest.mark.asyncio
    async def test_connect_with_incomplete_settings(self):
        connection = DataverseConnection(DataverseSettings())

        with pytest.raises(ConfigurationException):
            await connection.connect()

    @pytest.mark.asyncio
    async def test_close_is_repeatable(self):
        transport, _ = make_transport()
        connection = DataverseConnection(VALID_SETTINGS, transport=transport)
        await connection.connect()

        await connection.close()
        await connection.close()

        assert connection.is_connected is False
        with pytest.raises(ConnectionNotEstablishedException):
            _ = connection.client

    @pytest.mark.asyncio
    async def test_close_without_connect(self):
        connection = DataverseConnection(VALID_SETTINGS)

        await connection.close()

        assert connection.is_connected is False
