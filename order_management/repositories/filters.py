"""
Helpers for building wildcard filter conditions.

Dataverse treats ``%``, ``_`` and ``[`` as wildcard metacharacters in
``like``/``contains`` conditions, so user-supplied search text must be
escaped before it is embedded in a pattern.
"""

from typing import Optional


def sanitize_like_value(value: Optional[str]) -> Optional[str]:
    """
    Escape wildcard metacharacters so the value matches literally.

    ``[`` is escaped first; escaping it after ``%`` and ``_`` would also
    rewrite the brackets those substitutions introduce.

    Examples:
        >>> sanitize_like_value("Contoso%Ltd")
        'Contoso[%]Ltd'
        >>> sanitize_like_value("%_[")
        '[%][_][[]'

    Args:
        value: Raw search text

    Returns:
        Escaped text; ``None`` and ``""`` are returned unchanged
    """
    if not value:
        return value

    return value.replace("[", "[[]").replace("%", "[%]").replace("_", "[_]")


def contains_pattern(value: str) -> str:
    """Wrap sanitised text in wildcards for "contains" semantics."""
    return f"%{sanitize_like_value(value)}%"
