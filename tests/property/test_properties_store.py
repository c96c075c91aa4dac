"""
Property-based tests for the SQLite error log.
"""
import os
import tempfile
import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import patch
from hypothesis import given, settings, strategies as st

from errorlog.config.timezone import TimezoneConverter
from errorlog.core.domain.error import Error
from errorlog.core.error_log import ErrorLog
from errorlog.core.exceptions import InvalidArgumentError, StorageError
from errorlog.db.database import create_session_factory, create_store_engine
from errorlog.db.queries import create_error_record
from errorlog.db.session import session_scope
from errorlog.stores.sqlite_error_log import SqliteErrorLog


BASE_TIME = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

text = st.text(
    alphabet=st.characters(exclude_categories=("Cs",)),
    max_size=30,
)

errors = st.builds(
    Error,
    application_name=text,
    host_name=text,
    type=text,
    source=text,
    message=st.text(alphabet=st.characters(exclude_categories=("Cs",)), max_size=700),
    detail=text,
    user=text,
    time=st.datetimes(
        min_value=datetime(1971, 1, 1),
        max_value=datetime(2100, 1, 1),
        timezones=st.just(timezone.utc),
    ),
    status_code=st.integers(min_value=0, max_value=599),
    server_variables=st.dictionaries(text, text, max_size=3),
    cookies=st.dictionaries(text, text, max_size=3),
)


@pytest.fixture
def store(tmp_path):
    return SqliteErrorLog(f"Data Source={tmp_path / 'errors.db'}", application_name="shop")


def _error(minutes: int = 0, **kwargs) -> Error:
    return Error(type="System.Exception", time=BASE_TIME + timedelta(minutes=minutes), **kwargs)


def test_store_satisfies_error_log_protocol(store):
    assert isinstance(store, ErrorLog)
    assert store.name == "SQLite Error Log"
    assert store.application_name == "shop"


def test_example_scenario(store):
    """Log one error, read it back by id and as a page"""
    error_id = store.log(Error(type="System.Exception", message="boom", time=BASE_TIME))

    assert error_id == "1"

    entry = store.get_error("1")
    assert entry is not None
    assert entry.id == "1"
    assert entry.error.type == "System.Exception"
    assert entry.error.message == "boom"
    assert entry.log is store

    entries = []
    total = store.get_errors(0, 10, entries)
    assert total == 1
    assert len(entries) == 1
    assert entries[0].id == "1"


# Property: Log -> GetError round-trip
@given(error=errors)
@settings(max_examples=25, deadline=None)
def test_log_get_error_round_trip(error):
    """
    Feature: error-log-store, Property: Log/GetError round-trip

    For any logged error, fetching it by the returned id gives back an equal
    error, with the time expressed in local time.
    """
    with tempfile.TemporaryDirectory() as directory:
        store = SqliteErrorLog(
            f"sqlite:///{os.path.join(directory, 'errors.db')}",
            timezone_converter=TimezoneConverter("Asia/Tokyo"),
        )

        entry = store.get_error(store.log(error))

        assert entry.error == error
        assert entry.error.time.utcoffset() == timedelta(hours=9)


# Property: Monotonic identity
@given(count=st.integers(min_value=1, max_value=20))
@settings(max_examples=10, deadline=None)
def test_ids_strictly_increase(count):
    """
    Feature: error-log-store, Property: Monotonic identity

    Ids returned by consecutive log calls are distinct and strictly
    increasing, whatever the error times are.
    """
    with tempfile.TemporaryDirectory() as directory:
        store = SqliteErrorLog(f"Data Source={os.path.join(directory, 'errors.db')}")

        ids = [int(store.log(_error(minutes=-i))) for i in range(count)]

        assert ids == sorted(set(ids))


# Property: Paging coverage
@given(
    offsets=st.lists(st.integers(min_value=0, max_value=3), max_size=25),
    page_size=st.integers(min_value=1, max_value=7),
)
@settings(max_examples=25, deadline=None)
def test_pages_cover_all_rows_in_order(offsets, page_size):
    """
    Feature: error-log-store, Property: Paging coverage

    Concatenating every page yields each row exactly once, ordered by time
    descending and then by id descending, and every call reports the total.
    """
    with tempfile.TemporaryDirectory() as directory:
        store = SqliteErrorLog(f"Data Source={os.path.join(directory, 'errors.db')}")

        logged = []
        for minutes in offsets:
            error = _error(minutes=minutes)
            logged.append((error.time, int(store.log(error))))

        expected = [error_id for _, error_id in sorted(logged, reverse=True)]
        page_count = -(-len(logged) // page_size)

        seen = []
        for page_index in range(page_count):
            entries = []
            assert store.get_errors(page_index, page_size, entries) == len(logged)
            assert len(entries) <= page_size
            seen.extend(int(entry.id) for entry in entries)

        assert seen == expected


# Property: Paging boundary
@given(
    row_count=st.integers(min_value=0, max_value=5),
    page_index=st.integers(min_value=0, max_value=10 ** 6),
    page_size=st.integers(min_value=0, max_value=10 ** 6),
)
@settings(max_examples=25, deadline=None)
def test_window_past_end_is_empty(row_count, page_index, page_size):
    """
    Feature: error-log-store, Property: Paging boundary

    A window starting at or past the last row returns no entries but still
    reports the total.
    """
    with tempfile.TemporaryDirectory() as directory:
        store = SqliteErrorLog(f"Data Source={os.path.join(directory, 'errors.db')}")
        for i in range(row_count):
            store.log(_error(minutes=i))

        entries = []
        total = store.get_errors(page_index, page_size, entries)

        assert total == row_count
        if page_index * page_size >= row_count:
            assert entries == []


def test_same_time_newest_insert_first(store):
    for _ in range(3):
        store.log(_error())

    entries = []
    store.get_errors(0, 10, entries)

    assert [entry.id for entry in entries] == ["3", "2", "1"]


def test_huge_page_size_returns_remaining_rows(store):
    for i in range(3):
        store.log(_error(minutes=i))

    entries = []
    assert store.get_errors(0, 2 ** 63, entries) == 3
    assert [entry.id for entry in entries] == ["3", "2", "1"]

    entries = []
    assert store.get_errors(1, 2 ** 64, entries) == 3
    assert entries == []


def test_get_errors_without_list_only_counts(store):
    store.log(_error())
    store.log(_error(minutes=1))

    assert store.get_errors(0, 10) == 2
    assert store.get_errors(5, 0, []) == 2


def test_page_entries_use_narrow_columns(store):
    store.log(_error(
        message="m" * 600,
        detail="Traceback ...",
        host_name="h" * 40,
        server_variables={"PATH_INFO": "/cart"},
    ))

    entries = []
    store.get_errors(0, 1, entries)
    listed = entries[0].error

    assert listed.message == "m" * 500
    assert listed.host_name == "h" * 30
    assert listed.application_name == "shop"
    assert listed.detail == ""
    assert listed.server_variables == {}

    full = store.get_error(entries[0].id).error
    assert full.message == "m" * 600
    assert full.detail == "Traceback ..."
    assert full.server_variables == {"PATH_INFO": "/cart"}


def test_page_times_are_local(tmp_path):
    store = SqliteErrorLog(
        f"Data Source={tmp_path / 'errors.db'}",
        timezone_converter=TimezoneConverter("America/New_York"),
    )
    store.log(_error())

    entries = []
    store.get_errors(0, 1, entries)

    assert entries[0].error.time == BASE_TIME
    assert entries[0].error.time.utcoffset() == timedelta(hours=-5)


def test_application_column_falls_back_to_error(tmp_path):
    store = SqliteErrorLog(f"Data Source={tmp_path / 'errors.db'}")
    store.log(_error(application_name="billing"))

    entries = []
    store.get_errors(0, 1, entries)

    assert entries[0].error.application_name == "billing"


def test_unknown_id_is_not_found(store):
    store.log(_error())

    assert store.get_error("2") is None
    assert store.get_error("-7") is None


@pytest.mark.parametrize("bad_id", [
    None, "", "   ", "abc", "1.5", "0x10", str(2 ** 63), "1_0", " 1 ", "\u0663", "+ 1",
])
def test_unparseable_id_is_rejected(store, bad_id):
    with pytest.raises(InvalidArgumentError):
        store.get_error(bad_id)


def test_log_requires_error(store):
    with pytest.raises(InvalidArgumentError):
        store.log(None)

    assert store.get_errors(0, 10) == 0


@pytest.mark.parametrize("page_index,page_size", [(-1, 10), (0, -1), (-3, -3)])
def test_negative_paging_rejected_before_storage(store, page_index, page_size):
    with patch("errorlog.stores.sqlite_error_log.session_scope") as scope:
        with pytest.raises(InvalidArgumentError):
            store.get_errors(page_index, page_size, [])

    scope.assert_not_called()


def test_corrupt_xml_is_a_storage_error(store):
    session_factory = create_session_factory(create_store_engine(store.database_path))
    with session_scope(session_factory) as db:
        record = create_error_record(
            db=db,
            application="shop",
            host="web1",
            type="X",
            source="",
            message="",
            user="",
            status_code=0,
            time_utc=datetime(2024, 1, 1),
            all_xml="<error",
        )
        error_id = record.id

    with pytest.raises(StorageError):
        store.get_error(str(error_id))


def test_missing_table_is_a_storage_error(store):
    os.remove(store.database_path)

    with pytest.raises(StorageError):
        store.get_errors(0, 10, [])

    with pytest.raises(StorageError):
        store.log(_error())


def test_records_persist_across_instances(tmp_path):
    connection_string = f"Data Source={tmp_path / 'errors.db'}"
    first = SqliteErrorLog(connection_string)
    error_id = first.log(_error(message="kept"))

    second = SqliteErrorLog(connection_string)

    assert second.get_error(error_id).error.message == "kept"
    assert second.get_errors(0, 10) == 1
