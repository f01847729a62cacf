"""Base model for all data models in the billing engine.

This module provides a base Pydantic model with the shared configuration
used by timesheet entries, billing configuration and project records.
"""

from decimal import Decimal
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict


class BaseDataModel(BaseModel):
    """Base class for all data models.

    Models are immutable: the engine treats timesheet entries and billing
    configuration as read-only input and produces copies when it needs a
    different view of a record (e.g. a canonical project id).

    Example:
        >>> class Client(BaseDataModel):
        ...     client_id: str
        >>> client = Client(client_id="C-1")
        >>> client.model_dump()
        {'client_id': 'C-1'}
    """

    model_config = ConfigDict(
        # Allow arbitrary types like Decimal, date
        arbitrary_types_allowed=True,
        strict=False,
        extra="forbid",
        frozen=True,
    )


def to_decimal(value: Union[str, int, float, Decimal]) -> Decimal:
    """Convert a numeric value to Decimal without binary float artefacts.

    Args:
        value: The value to convert

    Returns:
        The value as a Decimal

    Raises:
        ValueError: If the value cannot be converted to Decimal
    """
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value).strip())
    except (ValueError, TypeError, ArithmeticError) as e:
        raise ValueError(f"Cannot convert {value!r} to Decimal: {e}")


def to_optional_decimal(
    value: Optional[Union[str, int, float, Decimal]],
) -> Optional[Decimal]:
    """Convert a value to Decimal, keeping None (and blank strings) as None."""
    if value is None:
        return None
    if isinstance(value, str) and not value.strip():
        return None
    return to_decimal(value)
