from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import InfrastructureError, StorageTimeoutError, StorageUnavailableError
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)

# Lock wait timeout, statement timeout, lost connection mid-query.
_TIMEOUT_ERRNOS = {1205, 3024, 2013}


def translate_db_error(exc: mysql.connector.Error) -> InfrastructureError:
    """Map a driver failure onto the retryable infrastructure errors."""

    if getattr(exc, "errno", None) in _TIMEOUT_ERRNOS:
        return StorageTimeoutError(f"Storage timed out: {exc}")
    return StorageUnavailableError(f"Storage unavailable: {exc}")


def is_duplicate_key(exc: mysql.connector.Error, key_name: Optional[str] = None) -> bool:
    """True for a unique-constraint violation, optionally on one named index."""

    if getattr(exc, "errno", None) != errorcode.ER_DUP_ENTRY:
        return False
    if key_name is None:
        return True
    return key_name in str(getattr(exc, "msg", "") or exc)


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """One connection + transaction per unit of work.

    Integrity errors are re-raised untouched so repositories can map them to
    domain errors; every other driver error becomes an InfrastructureError.
    """

    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as exc:
        logger.error("Cannot open database connection: %s", exc)
        raise translate_db_error(exc) from exc

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.IntegrityError:
        conn.rollback()
        raise
    except mysql.connector.Error as exc:
        _safe_rollback(conn)
        logger.error("Database operation failed: %s", exc)
        raise translate_db_error(exc) from exc
    except Exception:
        _safe_rollback(conn)
        raise
    finally:
        conn.close()


def _safe_rollback(conn) -> None:
    try:
        conn.rollback()
    except mysql.connector.Error as exc:
        # Connection already lost; the original error is what matters.
        logger.warning("Rollback failed: %s", exc)


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])
