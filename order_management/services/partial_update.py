"""
Partial-update helpers.

An update request is sparse: a field left unset (``None``) or, for text,
sent as an empty string must leave the stored value untouched.
"""

from typing import Any, Callable, Optional, TypeVar

T = TypeVar("T")


def is_provided(value: Any) -> bool:
    """Whether an update field carries a value to apply."""
    if value is None:
        return False
    if isinstance(value, str):
        return value != ""
    return True


def apply_if_provided(value: Optional[T], setter: Callable[[T], None]) -> bool:
    """
    Call ``setter`` with ``value`` when the value was provided.

    The setter may validate and raise; nothing is rolled back in that case.

    Returns:
        True if the setter ran
    """
    if not is_provided(value):
        return False
    setter(value)
    return True


def field_setter(target: Any, attribute: str) -> Callable[[Any], None]:
    """Setter that assigns to ``target.attribute``."""

    def _set(value: Any) -> None:
        setattr(target, attribute, value)

    return _set
