from __future__ import annotations

import pytest

from sqlstore.core.errors import InvalidColumn, InvalidInput
from sqlstore.repositories.filters import is_valid_column_name, validate_filter


def test_validate_filter_accepts_plain_columns():
    validate_filter({"name": "test", "age": 30, "created_at": None})


@pytest.mark.parametrize("value", [None, {}])
def test_validate_filter_empty_is_noop(value):
    validate_filter(value)


def test_validate_filter_rejects_injection_and_names_the_key():
    key = "name; DROP TABLE users; --"
    with pytest.raises(InvalidColumn) as excinfo:
        validate_filter({key: "test"})

    assert excinfo.value.column == key
    assert str(excinfo.value) == f"invalid column name: {key}"
    assert isinstance(excinfo.value, InvalidInput)
    assert isinstance(excinfo.value, ValueError)


def test_validate_filter_reports_first_offending_key():
    with pytest.raises(InvalidColumn) as excinfo:
        validate_filter({"name": 1, "bad'one": 2, "bad;two": 3})
    assert excinfo.value.column == "bad'one"


@pytest.mark.parametrize("name", ["name", "age", "created_at", "authors.id", "a-b"])
def test_is_valid_column_name_accepts(name):
    assert is_valid_column_name(name)


@pytest.mark.parametrize("name", ["name;", "age--", "created_at'", 'quoted"', "x -- y"])
def test_is_valid_column_name_rejects(name):
    assert not is_valid_column_name(name)
