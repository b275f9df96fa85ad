"""Helpers for building partial UPDATE statements from declared field maps."""

from enum import Enum
from typing import AbstractSet, Any, Dict, Mapping, Type

from app.core.exceptions import BadRequestError


def sql_for_partial_update(
    data: Mapping[str, Any],
    field_columns: Mapping[Enum, str],
    fields: Type[Enum],
    nullable: AbstractSet[Enum] = frozenset(),
) -> Dict[str, Any]:
    """
    Translate a partial update payload into {column: value}.

    Every key must be a member of `fields` and have an entry in
    `field_columns`; anything else is rejected rather than dropped.
    Only fields listed in `nullable` may be set to None.

    Example:
        >>> sql_for_partial_update({"first_name": "Aliya", "city": "Fresno"},
        ...                        USER_FIELD_COLUMNS, UserField)
        {'first_name': 'Aliya', 'current_city': 'Fresno'}

    Raises:
        BadRequestError: empty payload, a key outside the allow-list, or
            None for a field that is not nullable.
    """
    if not data:
        raise BadRequestError("No data")

    values = {}
    for key, value in data.items():
        try:
            field = fields(key)
        except ValueError:
            raise BadRequestError(f"Invalid data: {key}")
        column = field_columns.get(field)
        if column is None:
            raise BadRequestError(f"Invalid data: {key}")
        if value is None and field not in nullable:
            raise BadRequestError(f"Invalid data: {key} cannot be null")
        values[column] = value
    return values
