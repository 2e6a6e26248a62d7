"""
Async client for the Microsoft Dataverse Web API (OData v4).

Exposes the five operations the repositories need (retrieve,
retrieve_multiple, create, update, delete) over a generic named-attribute
``Entity`` representation. Monetary and option-set attributes are wrapped
in ``Money`` and ``OptionSetValue`` on the way in and unwrapped on the way
out, driven by the ``EntitySchema`` of each table. Numbers are read as
``Decimal``, and decimal values are written as exact strings with
``IEEE754Compatible=true`` so no amount passes through a float.

Authentication uses the OAuth2 client-credentials flow; the bearer token is
cached and refreshed shortly before it expires.
"""

import asyncio
import re
import time
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

import httpx
import structlog

from ..domain.exceptions import ExternalServiceException
from ..metrics import track_dataverse_operation

logger = structlog.get_logger(__name__)

CREATED_ON = "createdon"
MODIFIED_ON = "modifiedon"

# Seconds subtracted from the token lifetime before it is considered expired
TOKEN_EXPIRY_MARGIN_SECONDS = 60

# Request bodies carry Edm.Decimal values as JSON strings
JSON_CONTENT_TYPE = "application/json; IEEE754Compatible=true"

_ENTITY_ID_PATTERN = re.compile(
    r"\(([0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12})\)\s*$"
)


class DataverseError(ExternalServiceException):
    """Raised when Dataverse rejects a request or cannot be reached."""

    def __init__(self, reason: str, status_code: Optional[int] = None):
        super().__init__(service="dataverse", reason=reason, status_code=status_code)


class RecordNotFoundError(DataverseError):
    """Raised when the addressed record does not exist (HTTP 404)."""

    def __init__(self, entity_set: str, record_id: Any):
        self.entity_set = entity_set
        self.record_id = record_id
        super().__init__(
            reason=f"{entity_set}({record_id}) does not exist", status_code=404
        )


@dataclass(frozen=True)
class Money:
    """Currency attribute value."""

    value: Decimal


@dataclass(frozen=True)
class OptionSetValue:
    """Choice (option set) attribute value."""

    value: int


@dataclass(frozen=True)
class EntitySchema:
    """
    Static description of a Dataverse table.

    Attributes:
        logical_name: Table logical name (e.g. ``account``)
        entity_set: Web API collection name (e.g. ``accounts``)
        primary_id: Primary key attribute (e.g. ``accountid``)
        money_fields: Attributes carried as ``Money``
        option_set_fields: Attributes carried as ``OptionSetValue``
    """

    logical_name: str
    entity_set: str
    primary_id: str
    money_fields: frozenset = frozenset()
    option_set_fields: frozenset = frozenset()
    datetime_fields: frozenset = frozenset({CREATED_ON, MODIFIED_ON})


def _attribute_key(key: Any) -> str:
    return key.value if isinstance(key, Enum) else str(key)


@dataclass
class Entity:
    """Generic record with attributes addressed by logical name."""

    schema: EntitySchema
    id: Optional[UUID] = None
    attributes: Dict[str, Any] = field(default_factory=dict)

    @property
    def logical_name(self) -> str:
        return self.schema.logical_name

    def __setitem__(self, key: Any, value: Any) -> None:
        self.attributes[_attribute_key(key)] = value

    def __getitem__(self, key: Any) -> Any:
        return self.attributes[_attribute_key(key)]

    def __contains__(self, key: Any) -> bool:
        return _attribute_key(key) in self.attributes

    def get(self, key: Any, default: Any = None) -> Any:
        """Attribute value, or ``default`` when absent or null."""
        value = self.attributes.get(_attribute_key(key))
        return default if value is None else value


class ConditionOperator(str, Enum):
    """Supported filter operators."""

    EQUAL = "eq"
    LIKE = "like"


@dataclass(frozen=True)
class ConditionExpression:
    """Single attribute condition."""

    attribute: str
    operator: ConditionOperator
    value: Any


@dataclass
class QueryExpression:
    """
    Query against one table.

    ``columns`` of ``None`` selects every column. Conditions are combined
    with ``and``.
    """

    schema: EntitySchema
    columns: Optional[Tuple[str, ...]] = None
    conditions: List[ConditionExpression] = field(default_factory=list)

    def add_condition(
        self, attribute: Any, operator: ConditionOperator, value: Any
    ) -> "QueryExpression":
        self.conditions.append(
            ConditionExpression(_attribute_key(attribute), operator, value)
        )
        return self


def format_odata_literal(value: Any) -> str:
    """Render a Python value as an OData literal."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, OptionSetValue):
        return str(value.value)
    if isinstance(value, Money):
        return str(value.value)
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, (int, float, Decimal, UUID)):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    escaped = str(value).replace("'", "''")
    return f"'{escaped}'"


def _render_like(attribute: str, pattern: str) -> str:
    """
    Render a ``like`` pattern with the string functions Dataverse supports.

    Dataverse treats ``%``, ``_`` and ``[`` inside ``contains``/``startswith``/
    ``endswith`` arguments as wildcards, so bracket-escaped literals pass
    through unchanged.
    """
    leading = pattern.startswith("%")
    trailing = pattern.endswith("%") and len(pattern) > 1
    inner = pattern[1 if leading else 0 : len(pattern) - (1 if trailing else 0)]
    literal = format_odata_literal(inner)
    if leading and trailing:
        return f"contains({attribute},{literal})"
    if trailing:
        return f"startswith({attribute},{literal})"
    if leading:
        return f"endswith({attribute},{literal})"
    return f"{attribute} eq {literal}"


def render_filter(conditions: List[ConditionExpression]) -> Optional[str]:
    """Build the ``$filter`` expression for a list of conditions."""
    if not conditions:
        return None
    parts = []
    for condition in conditions:
        if condition.operator == ConditionOperator.LIKE:
            parts.append(_render_like(condition.attribute, str(condition.value)))
        else:
            parts.append(
                f"{condition.attribute} eq {format_odata_literal(condition.value)}"
            )
    return " and ".join(parts)


def _to_wire(value: Any) -> Any:
    if isinstance(value, Money):
        return str(value.value)
    if isinstance(value, OptionSetValue):
        return value.value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, UUID):
        return str(value)
    return value


def _parse_datetime(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def entity_from_payload(schema: EntitySchema, payload: Dict[str, Any]) -> Entity:
    """Build an ``Entity`` from a Web API JSON record."""
    entity = Entity(schema=schema)
    raw_id = payload.get(schema.primary_id)
    if raw_id:
        entity.id = UUID(str(raw_id))

    for key, value in payload.items():
        if key.startswith("@") or "@" in key or key == schema.primary_id:
            continue
        if value is None:
            entity.attributes[key] = None
        elif key in schema.money_fields:
            entity.attributes[key] = Money(Decimal(str(value)))
        elif key in schema.option_set_fields:
            entity.attributes[key] = OptionSetValue(int(value))
        elif key in schema.datetime_fields:
            entity.attributes[key] = _parse_datetime(value)
        else:
            entity.attributes[key] = value
    return entity


def entity_to_payload(entity: Entity) -> Dict[str, Any]:
    """Serialise an ``Entity`` to a Web API JSON body."""
    return {
        key: _to_wire(value)
        for key, value in entity.attributes.items()
        if key not in entity.schema.datetime_fields
    }


class DataverseClient:
    """
    Client for the Dataverse Web API.

    One instance is shared by all concurrent requests; the underlying
    ``httpx.AsyncClient`` pools connections and the only mutable state is
    the cached access token.

    Attributes:
        url: Environment URL (e.g. ``https://org.crm.dynamics.com``)
        api_base: Web API root (``{url}/api/data/{version}``)
        timeout: Request timeout in seconds
    """

    def __init__(
        self,
        url: str,
        client_id: str,
        client_secret: str,
        tenant_id: str,
        api_version: str = "v9.2",
        timeout: float = 30.0,
        authority_host: str = "https://login.microsoftonline.com",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.url = url.rstrip("/")
        self.client_id = client_id
        self.client_secret = client_secret
        self.tenant_id = tenant_id
        self.api_base = f"{self.url}/api/data/{api_version}"
        self.timeout = timeout
        self.token_url = f"{authority_host.rstrip('/')}/{tenant_id}/oauth2/v2.0/token"

        self._http = httpx.AsyncClient(timeout=timeout, transport=transport)
        self._access_token: Optional[str] = None
        self._token_expires_at = 0.0
        self._token_lock = asyncio.Lock()

    @property
    def is_closed(self) -> bool:
        return self._http.is_closed

    async def close(self) -> None:
        """Close the HTTP client and release connections."""
        if not self._http.is_closed:
            await self._http.aclose()
            logger.debug("Closed Dataverse HTTP client")

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    async def _get_access_token(self) -> str:
        if self._access_token and time.monotonic() < self._token_expires_at:
            return self._access_token

        async with self._token_lock:
            if self._access_token and time.monotonic() < self._token_expires_at:
                return self._access_token

            logger.debug("Requesting Dataverse access token", tenant_id=self.tenant_id)
            try:
                response = await self._http.post(
                    self.token_url,
                    data={
                        "grant_type": "client_credentials",
                        "client_id": self.client_id,
                        "client_secret": self.client_secret,
                        "scope": f"{self.url}/.default",
                    },
                )
            except httpx.HTTPError as e:
                raise DataverseError(f"Token request failed: {e}") from e

            if response.status_code != 200:
                raise DataverseError(
                    f"Token request rejected: {self._error_message(response)}",
                    status_code=response.status_code,
                )

            try:
                body = response.json()
                expires_in = int(body.get("expires_in", 3600))
                access_token = body["access_token"]
            except (ValueError, KeyError, TypeError, AttributeError) as e:
                raise DataverseError(
                    "Token response was malformed", status_code=response.status_code
                ) from e
            if not isinstance(access_token, str) or not access_token:
                raise DataverseError(
                    "Token response was malformed", status_code=response.status_code
                )

            self._access_token = access_token
            self._token_expires_at = (
                time.monotonic() + max(expires_in - TOKEN_EXPIRY_MARGIN_SECONDS, 0)
            )
            return self._access_token

    async def _headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        headers = {
            "Authorization": f"Bearer {await self._get_access_token()}",
            "Accept": "application/json",
            "OData-MaxVersion": "4.0",
            "OData-Version": "4.0",
        }
        if extra:
            headers.update(extra)
        return headers

    # ------------------------------------------------------------------
    # Transport helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or f"HTTP {response.status_code}"
        if isinstance(body, dict):
            error = body.get("error")
            if isinstance(error, dict) and error.get("message"):
                return str(error["message"])
            if body.get("error_description"):
                return str(body["error_description"])
        return f"HTTP {response.status_code}"

    async def _send(
        self,
        operation: str,
        schema_name: str,
        method: str,
        url: str,
        *,
        params: Optional[Dict[str, str]] = None,
        json: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        not_found: Optional[Tuple[str, Any]] = None,
    ) -> httpx.Response:
        start_time = time.perf_counter()
        outcome = "error"
        try:
            request_headers = await self._headers(headers)
            if json is not None:
                request_headers["Content-Type"] = JSON_CONTENT_TYPE
            try:
                response = await self._http.request(
                    method, url, params=params, json=json, headers=request_headers
                )
            except httpx.HTTPError as e:
                raise DataverseError(f"{operation} request failed: {e}") from e

            if response.status_code == 404 and not_found is not None:
                outcome = "not_found"
                raise RecordNotFoundError(*not_found)
            if response.status_code >= 400:
                raise DataverseError(
                    self._error_message(response), status_code=response.status_code
                )
            outcome = "success"
            return response
        finally:
            track_dataverse_operation(
                operation, schema_name, outcome, time.perf_counter() - start_time
            )

    def _record_url(self, schema: EntitySchema, record_id: UUID) -> str:
        return f"{self.api_base}/{schema.entity_set}({record_id})"

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def who_am_i(self) -> Dict[str, Any]:
        """Call the ``WhoAmI`` function; used as a connectivity probe."""
        response = await self._send(
            "who_am_i", "system", "GET", f"{self.api_base}/WhoAmI"
        )
        return response.json()

    async def retrieve(
        self,
        schema: EntitySchema,
        record_id: UUID,
        columns: Optional[Tuple[str, ...]] = None,
    ) -> Entity:
        """
        Retrieve a single record.

        Raises:
            RecordNotFoundError: If the record does not exist
            DataverseError: On any other failure
        """
        params = {"$select": ",".join(columns)} if columns else None
        response = await self._send(
            "retrieve",
            schema.logical_name,
            "GET",
            self._record_url(schema, record_id),
            params=params,
            not_found=(schema.entity_set, record_id),
        )
        return entity_from_payload(schema, response.json(parse_float=Decimal))

    async def retrieve_multiple(self, query: QueryExpression) -> List[Entity]:
        """Run a query, following ``@odata.nextLink`` paging."""
        schema = query.schema
        params: Dict[str, str] = {}
        if query.columns:
            params["$select"] = ",".join(query.columns)
        filter_expression = render_filter(query.conditions)
        if filter_expression:
            params["$filter"] = filter_expression

        url: Optional[str] = f"{self.api_base}/{schema.entity_set}"
        entities: List[Entity] = []
        while url:
            response = await self._send(
                "retrieve_multiple",
                schema.logical_name,
                "GET",
                url,
                params=params or None,
            )
            body = response.json(parse_float=Decimal)
            entities.extend(
                entity_from_payload(schema, record) for record in body.get("value", [])
            )
            url = body.get("@odata.nextLink")
            # nextLink already carries the query string
            params = {}
        return entities

    async def create(self, entity: Entity) -> UUID:
        """Create a record and return the identifier assigned by Dataverse."""
        schema = entity.schema
        response = await self._send(
            "create",
            schema.logical_name,
            "POST",
            f"{self.api_base}/{schema.entity_set}",
            json=entity_to_payload(entity),
        )

        entity_id_header = response.headers.get("OData-EntityId", "")
        match = _ENTITY_ID_PATTERN.search(entity_id_header)
        if match:
            return UUID(match.group(1))
        if response.content:
            body = response.json()
            if body.get(schema.primary_id):
                return UUID(str(body[schema.primary_id]))
        raise DataverseError("Create response did not include the new record id")

    async def update(self, entity: Entity) -> None:
        """
        Update an existing record.

        ``If-Match: *`` prevents the PATCH from creating the record when it
        does not exist.
        """
        if entity.id is None:
            raise ValueError("Entity id is required for update")
        schema = entity.schema
        await self._send(
            "update",
            schema.logical_name,
            "PATCH",
            self._record_url(schema, entity.id),
            json=entity_to_payload(entity),
            headers={"If-Match": "*"},
            not_found=(schema.entity_set, entity.id),
        )

    async def delete(self, schema: EntitySchema, record_id: UUID) -> None:
        """Delete a record."""
        await self._send(
            "delete",
            schema.logical_name,
            "DELETE",
            self._record_url(schema, record_id),
            not_found=(schema.entity_set, record_id),
        )
