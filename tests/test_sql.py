import pytest

from app.constants.constants import (
    GAME_FIELD_COLUMNS,
    GAME_NULLABLE_FIELDS,
    USER_FIELD_COLUMNS,
    USER_NULLABLE_FIELDS,
    GameField,
    UserField,
)
from app.core.exceptions import BadRequestError
from app.utils.sql import sql_for_partial_update


def test_maps_logical_fields_to_columns():
    values = sql_for_partial_update(
        {"first_name": "Aliya", "city": "Fresno", "is_private": True},
        USER_FIELD_COLUMNS,
        UserField,
    )
    assert values == {"first_name": "Aliya", "current_city": "Fresno", "is_private": True}


def test_game_fields():
    values = sql_for_partial_update({"date": "2024-05-01", "title": "Run"}, GAME_FIELD_COLUMNS, GameField)
    assert values == {"game_date": "2024-05-01", "title": "Run"}


def test_empty_payload():
    with pytest.raises(BadRequestError) as exc:
        sql_for_partial_update({}, USER_FIELD_COLUMNS, UserField)
    assert exc.value.message == "No data"


def test_unknown_key_is_rejected_not_dropped():
    with pytest.raises(BadRequestError) as exc:
        sql_for_partial_update({"first_name": "A", "username": "new"}, USER_FIELD_COLUMNS, UserField)
    assert exc.value.message == "Invalid data: username"


def test_null_only_allowed_for_nullable_fields():
    values = sql_for_partial_update(
        {"city": None, "profile_img": None}, USER_FIELD_COLUMNS, UserField, USER_NULLABLE_FIELDS
    )
    assert values == {"current_city": None, "profile_img": None}

    with pytest.raises(BadRequestError) as exc:
        sql_for_partial_update({"first_name": None}, USER_FIELD_COLUMNS, UserField, USER_NULLABLE_FIELDS)
    assert exc.value.message == "Invalid data: first_name cannot be null"

    with pytest.raises(BadRequestError):
        sql_for_partial_update({"date": None}, GAME_FIELD_COLUMNS, GameField, GAME_NULLABLE_FIELDS)
