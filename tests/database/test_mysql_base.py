from __future__ import annotations

from unittest.mock import MagicMock

import mysql.connector
import pytest
from mysql.connector import errorcode

from gym_dashboard.core.exceptions import DuplicateKeyError, StoreError
from gym_dashboard.database.bootstrap import iter_sql_statements, strip_create_db_and_use
from gym_dashboard.database.mysql_base import db_cursor, to_decimal, transaction


def _factory():
    factory = MagicMock()
    factory.connect.side_effect = lambda: MagicMock()
    return factory


def test_db_cursor_commits_and_closes():
    factory = _factory()
    with db_cursor(factory) as (conn, cur):
        cur.execute("SELECT 1")

    conn.commit.assert_called_once()
    conn.rollback.assert_not_called()
    cur.close.assert_called_once()
    conn.close.assert_called_once()


def test_duplicate_entry_becomes_duplicate_key_error():
    factory = _factory()
    with pytest.raises(DuplicateKeyError):
        with db_cursor(factory) as (conn, cur):
            raise mysql.connector.IntegrityError(msg="Duplicate entry", errno=errorcode.ER_DUP_ENTRY)

    conn.rollback.assert_called_once()
    conn.commit.assert_not_called()


def test_other_driver_errors_become_store_error():
    factory = _factory()
    with pytest.raises(StoreError) as info:
        with db_cursor(factory) as (conn, cur):
            raise mysql.connector.ProgrammingError(msg="bad sql", errno=errorcode.ER_PARSE_ERROR)
    assert not isinstance(info.value, DuplicateKeyError)


def test_connect_failure_is_a_store_error():
    factory = MagicMock()
    factory.connect.side_effect = mysql.connector.InterfaceError(msg="refused")
    with pytest.raises(StoreError):
        with db_cursor(factory):
            pass


def test_transaction_shares_one_connection():
    factory = _factory()
    with transaction(factory) as (outer_conn, _):
        with db_cursor(factory) as (first, _):
            pass
        with db_cursor(factory) as (second, _):
            pass

    assert first is outer_conn
    assert second is outer_conn
    assert factory.connect.call_count == 1
    outer_conn.commit.assert_called_once()
    outer_conn.close.assert_called_once()


def test_nested_transaction_joins_outer():
    factory = _factory()
    with transaction(factory) as (outer, _):
        with transaction(factory) as (inner, _):
            pass
    assert inner is outer
    outer.commit.assert_called_once()


def test_transaction_rolls_back_on_failure():
    factory = _factory()
    with pytest.raises(ValueError):
        with transaction(factory) as (conn, _):
            raise ValueError("boom")

    conn.rollback.assert_called_once()
    conn.commit.assert_not_called()

    with db_cursor(factory) as (fresh, _):
        pass
    assert fresh is not conn


def test_to_decimal():
    assert to_decimal(None) is None
    assert str(to_decimal(12.5)) == "12.5"
    assert str(to_decimal("200.00")) == "200.00"


def test_schema_script_splitting():
    sql = """
    CREATE DATABASE IF NOT EXISTS gym;
    USE gym;
    -- owners; one row per gym
    CREATE TABLE owners (name VARCHAR(10) DEFAULT 'a;b');
    INSERT INTO owners VALUES ('x')
    """
    statements = list(iter_sql_statements(strip_create_db_and_use(sql)))
    assert statements == [
        "CREATE TABLE owners (name VARCHAR(10) DEFAULT 'a;b')",
        "INSERT INTO owners VALUES ('x')",
    ]
