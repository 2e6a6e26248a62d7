"""
Typed attribute readers shared by the repository mappers.

Every reader returns a typed default when the attribute is missing or
null, so a sparse record from the store never produces ``None`` in a
required domain field. Wrapped values (``Money``, ``OptionSetValue``) are
unwrapped; bare numbers are accepted as well.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from ..domain.entities import MIN_TIMESTAMP
from ..infrastructure.dataverse_client import Entity, Money, OptionSetValue


def _unwrap(value: Any) -> Any:
    if isinstance(value, (Money, OptionSetValue)):
        return value.value
    return value


def read_text(entity: Entity, key: Any) -> str:
    value = entity.get(key)
    return "" if value is None else str(value)


def read_int(entity: Entity, key: Any) -> int:
    value = read_optional_int(entity, key)
    return 0 if value is None else value


def read_optional_int(entity: Entity, key: Any) -> Optional[int]:
    value = _unwrap(entity.get(key))
    return None if value is None else int(value)


def read_decimal(entity: Entity, key: Any) -> Decimal:
    value = read_optional_decimal(entity, key)
    return Decimal("0") if value is None else value


def read_optional_decimal(entity: Entity, key: Any) -> Optional[Decimal]:
    value = _unwrap(entity.get(key))
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def read_timestamp(entity: Entity, key: Any) -> datetime:
    value = entity.get(key)
    return value if isinstance(value, datetime) else MIN_TIMESTAMP
