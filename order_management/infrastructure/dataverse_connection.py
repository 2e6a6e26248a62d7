"""
Dataverse connection management.

A single ``DataverseConnection`` is created at startup and shared by all
requests. It owns the ``DataverseClient`` and knows whether a connection
has been established.
"""

import asyncio
from dataclasses import dataclass
from typing import Optional

import httpx
import structlog

from ..config import Settings
from ..domain.exceptions import (
    ConfigurationException,
    ConnectionNotEstablishedException,
    ExternalServiceException,
)
from .dataverse_client import DataverseClient

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class DataverseSettings:
    """Connection settings for a Dataverse environment."""

    url: str = ""
    client_id: str = ""
    client_secret: str = ""
    tenant_id: str = ""
    api_version: str = "v9.2"
    timeout_seconds: float = 30.0
    authority_host: str = "https://login.microsoftonline.com"

    @classmethod
    def from_settings(cls, settings: Settings) -> "DataverseSettings":
        return cls(
            url=settings.DATAVERSE_URL,
            client_id=settings.DATAVERSE_CLIENT_ID,
            client_secret=settings.DATAVERSE_CLIENT_SECRET,
            tenant_id=settings.DATAVERSE_TENANT_ID,
            api_version=settings.DATAVERSE_API_VERSION,
            timeout_seconds=settings.DATAVERSE_TIMEOUT_SECONDS,
            authority_host=settings.DATAVERSE_AUTHORITY_HOST,
        )

    def validate(self) -> None:
        """Raise ``ConfigurationException`` for the first missing value."""
        for name in ("url", "client_id", "client_secret", "tenant_id"):
            if not getattr(self, name):
                raise ConfigurationException(f"DATAVERSE_{name.upper()}")


class DataverseConnection:
    """
    Manages the connection to Microsoft Dataverse.

    ``connect`` is idempotent. ``client`` raises until a connection has
    been established.
    """

    def __init__(
        self,
        settings: DataverseSettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if settings is None:
            raise ValueError("settings must not be None")
        self.settings = settings
        self._transport = transport
        self._client: Optional[DataverseClient] = None
        self._connected = False
        self._lock = asyncio.Lock()

    @property
    def is_connected(self) -> bool:
        return self._connected and self._client is not None and not self._client.is_closed

    @property
    def client(self) -> DataverseClient:
        if not self.is_connected:
            raise ConnectionNotEstablishedException()
        return self._client

    async def connect(self) -> None:
        """
        Establish a connection using client credentials.

        Concurrent callers share a single attempt; only one client is ever
        created per successful connection.

        Raises:
            ConfigurationException: If connection settings are incomplete
            ExternalServiceException: If Dataverse cannot be reached or
                rejects the credentials
        """
        if self.is_connected:
            logger.info("Dataverse connection is already established")
            return

        async with self._lock:
            if self.is_connected:
                return

            self.settings.validate()
            logger.info("Establishing connection to Dataverse", url=self.settings.url)

            # A client closed underneath us is replaced, never leaked
            if self._client is not None:
                await self._client.close()
                self._client = None

            client = DataverseClient(
                url=self.settings.url,
                client_id=self.settings.client_id,
                client_secret=self.settings.client_secret,
                tenant_id=self.settings.tenant_id,
                api_version=self.settings.api_version,
                timeout=self.settings.timeout_seconds,
                authority_host=self.settings.authority_host,
                transport=self._transport,
            )
            try:
                identity = await client.who_am_i()
            except ExternalServiceException as e:
                await client.close()
                logger.error("Failed to connect to Dataverse", error=e.message)
                raise

            self._client = client
            self._connected = True
            logger.info(
                "Successfully connected to Dataverse",
                user_id=identity.get("UserId"),
                organization_id=identity.get("OrganizationId"),
            )

    async def close(self) -> None:
        """Release the client. Safe to call more than once."""
        if self._client is not None:
            await self._client.close()
            logger.info("Dataverse connection closed")
        self._client = None
        self._connected = False
