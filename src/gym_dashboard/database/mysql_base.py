from __future__ import annotations

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from decimal import Decimal
from typing import Any, Dict, Iterator, List, Optional, Tuple

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import DuplicateKeyError, StoreError
from .connection import ConnectionFactory

logger = logging.getLogger(__name__)

# (connection, cursor) of the transaction opened by ``transaction()``, if any.
_active: ContextVar[Optional[Tuple[Any, Any]]] = ContextVar("gym_dashboard_active_tx", default=None)


def _translate(exc: mysql.connector.Error) -> StoreError:
    if getattr(exc, "errno", None) == errorcode.ER_DUP_ENTRY:
        return DuplicateKeyError(str(exc))
    return StoreError(str(exc))


@contextmanager
def transaction(conn_factory: ConnectionFactory) -> Iterator[Tuple[Any, Any]]:
    """Run every ``db_cursor`` block inside on one connection, committed once.

    Nested calls join the outer transaction.
    """

    current = _active.get()
    if current is not None:
        yield current
        return

    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as e:
        logger.exception("Could not open database connection")
        raise _translate(e) from e

    cur = conn.cursor(dictionary=True)
    token = _active.set((conn, cur))
    try:
        yield conn, cur
        conn.commit()
    except mysql.connector.Error as e:
        conn.rollback()
        logger.exception("Transaction rolled back")
        raise _translate(e) from e
    except StoreError:
        conn.rollback()
        logger.exception("Transaction rolled back")
        raise
    except Exception:
        conn.rollback()
        raise
    finally:
        _active.reset(token)
        cur.close()
        conn.close()


@contextmanager
def db_cursor(conn_factory: ConnectionFactory, *, dictionary: bool = True):
    current = _active.get()
    if current is not None:
        try:
            yield current
        except mysql.connector.Error as e:
            raise _translate(e) from e
        return

    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as e:
        logger.exception("Could not open database connection")
        raise _translate(e) from e

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.Error as e:
        conn.rollback()
        raise _translate(e) from e
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def to_decimal(value: Any) -> Optional[Decimal]:
    """Normalize DECIMAL/FLOAT columns (connectors may return float or str)."""

    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))
