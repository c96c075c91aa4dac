"""
Tests for the Error and ErrorLogEntry value objects.
"""
import dataclasses
import pytest
from datetime import datetime, timezone

from errorlog.core.domain.entry import ErrorLogEntry
from errorlog.core.domain.error import Error


def test_naive_time_is_made_aware():
    naive = datetime(2024, 6, 1, 9, 15)

    error = Error(time=naive)

    assert error.time.tzinfo is not None
    assert error.time == naive.astimezone()


def test_default_time_is_now():
    before = datetime.now(timezone.utc)
    error = Error()
    after = datetime.now(timezone.utc)

    assert before <= error.time <= after


def test_error_is_immutable():
    error = Error(message="boom")

    with pytest.raises(dataclasses.FrozenInstanceError):
        error.message = "changed"


def _raise_value_error():
    raise ValueError("bad value")


def test_from_exception():
    try:
        _raise_value_error()
    except ValueError as e:
        error = Error.from_exception(e, application_name="shop", status_code=500)

    assert error.type == "ValueError"
    assert error.message == "bad value"
    assert error.source == __name__
    assert error.application_name == "shop"
    assert error.status_code == 500
    assert "_raise_value_error" in error.detail
    assert error.detail.rstrip().endswith("ValueError: bad value")
    assert error.host_name


def test_from_exception_qualifies_non_builtin_types():
    class CustomError(Exception):
        pass

    error = Error.from_exception(CustomError("nope"))

    assert error.type == f"{__name__}.test_from_exception_qualifies_non_builtin_types.<locals>.CustomError"
    assert error.source == ""


def test_entry_ignores_log_reference():
    error = Error(message="boom")
    log = object()

    entry = ErrorLogEntry("1", error, log)

    assert entry == ErrorLogEntry("1", error, None)
    assert entry.log is log
    assert "log=" not in repr(entry)


def test_collections_are_read_only():
    form = {"q": "shoes"}
    error = Error(form=form, cookies={"session": "abc"})

    with pytest.raises(TypeError):
        error.form["q"] = "boots"
    with pytest.raises(TypeError):
        error.cookies["extra"] = "x"

    # Later changes to the caller's dict do not leak in
    form["q"] = "boots"
    assert error.form == {"q": "shoes"}


def test_error_is_hashable():
    time = datetime(2024, 1, 1, tzinfo=timezone.utc)
    first = Error(message="boom", time=time, server_variables={"HTTP_HOST": "a", "PATH_INFO": "/"})
    second = Error(message="boom", time=time, server_variables={"PATH_INFO": "/", "HTTP_HOST": "a"})

    assert first == second
    assert hash(first) == hash(second)
    assert len({first, second, Error(message="other", time=time)}) == 2
