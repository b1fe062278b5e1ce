"""
ODBC driver primitives.

``DatabaseHandle`` never talks to an ODBC library directly.  It calls
the small set of primitives declared by ``OdbcDriver`` and treats the
connection, statement and result objects they return as opaque values
to be handed back to the same driver.

``PyodbcDriver`` implements the primitives with ``pyodbc``.  ``pyodbc``
is imported when the driver is instantiated, so importing this package
does not require unixODBC to be installed.

Every primitive either returns normally or raises ``DriverError`` with
the driver's diagnostic text.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from .errors import DriverError


class OdbcDriver(ABC):
    """Capability set required from an ODBC driver."""

    def __init__(self) -> None:
        self._last_error = ""

    def last_error_message(self) -> str:
        """Text of the most recent driver failure, ``""`` if none."""
        return self._last_error

    def _fail(self, message: str) -> DriverError:
        self._last_error = message
        return DriverError(message)

    @abstractmethod
    def connect(self, descriptor: str, username: str, password: str) -> Any:
        ...

    @abstractmethod
    def close(self, connection: Any) -> None:
        ...

    @abstractmethod
    def prepare(self, connection: Any, sql: str) -> Any:
        ...

    @abstractmethod
    def execute(self, statement: Any, params: Sequence[Any]) -> Any:
        ...

    @abstractmethod
    def execute_immediate(self, connection: Any, sql: str) -> Any:
        ...

    @abstractmethod
    def fetch_row_as_mapping(self, result: Any) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    def affected_row_count(self, result: Any) -> int:
        ...

    @abstractmethod
    def free_result(self, result: Any) -> None:
        ...

    @abstractmethod
    def set_autocommit(self, connection: Any, enabled: bool) -> None:
        ...

    @abstractmethod
    def commit(self, connection: Any) -> None:
        ...

    @abstractmethod
    def rollback(self, connection: Any) -> None:
        ...


@dataclass
class PreparedStatement:
    """Cursor bound to the SQL text it will execute."""

    cursor: Any
    sql: str


@dataclass
class ResultSet:
    """Executed cursor with its column names, read once from ``description``.

    ``columns`` is ``None`` when the statement produced no result set.
    """

    cursor: Any
    columns: Optional[List[str]] = None

    @classmethod
    def from_cursor(cls, cursor: Any) -> "ResultSet":
        if cursor.description is None:
            return cls(cursor)
        return cls(cursor, [col[0] for col in cursor.description])


def _quote_value(value: str) -> str:
    # ODBC attribute values containing separators must be brace-quoted
    if any(ch in value for ch in ";{}") or value != value.strip():
        return "{" + value.replace("}", "}}") + "}"
    return value


def _error_text(exc: Exception) -> str:
    # pyodbc errors carry (sqlstate, message)
    args = getattr(exc, "args", ())
    if len(args) > 1 and args[1]:
        return str(args[1])
    return str(exc)


class PyodbcDriver(OdbcDriver):
    """``OdbcDriver`` backed by ``pyodbc``.

    Args:
        timeout: Login timeout in seconds; ``0`` uses the driver default.
    """

    def __init__(self, timeout: int = 0) -> None:
        super().__init__()
        try:
            import pyodbc  # type: ignore[import]
        except ImportError as exc:
            raise ImportError(
                "pyodbc is not installed. Install it together with an ODBC driver manager (unixODBC) "
                "and the ODBC driver for your database."
            ) from exc
        self._pyodbc = pyodbc
        self._timeout = timeout

    def _translate(self, exc: Exception) -> DriverError:
        return self._fail(_error_text(exc))

    def connect(self, descriptor: str, username: str, password: str) -> Any:
        conn_str = f"{descriptor}UID={_quote_value(username)};PWD={_quote_value(password)};"
        try:
            return self._pyodbc.connect(conn_str, autocommit=True, timeout=self._timeout)
        except self._pyodbc.Error as exc:
            raise self._translate(exc) from exc

    def close(self, connection: Any) -> None:
        try:
            connection.close()
        except self._pyodbc.Error as exc:
            raise self._translate(exc) from exc

    def prepare(self, connection: Any, sql: str) -> PreparedStatement:
        # pyodbc prepares on first execute; only the cursor is allocated here
        try:
            return PreparedStatement(cursor=connection.cursor(), sql=sql)
        except self._pyodbc.Error as exc:
            raise self._translate(exc) from exc

    def execute(self, statement: PreparedStatement, params: Sequence[Any]) -> ResultSet:
        try:
            statement.cursor.execute(statement.sql, list(params))
        except self._pyodbc.Error as exc:
            statement.cursor.close()
            raise self._translate(exc) from exc
        return ResultSet.from_cursor(statement.cursor)

    def execute_immediate(self, connection: Any, sql: str) -> ResultSet:
        try:
            cursor = connection.cursor()
        except self._pyodbc.Error as exc:
            raise self._translate(exc) from exc
        try:
            cursor.execute(sql)
        except self._pyodbc.Error as exc:
            cursor.close()
            raise self._translate(exc) from exc
        return ResultSet.from_cursor(cursor)

    def fetch_row_as_mapping(self, result: ResultSet) -> Optional[Dict[str, Any]]:
        if result.columns is None:
            return None
        try:
            row = result.cursor.fetchone()
        except self._pyodbc.Error as exc:
            raise self._translate(exc) from exc
        if row is None:
            return None
        return dict(zip(result.columns, row))

    def affected_row_count(self, result: ResultSet) -> int:
        return result.cursor.rowcount

    def free_result(self, result: ResultSet) -> None:
        try:
            result.cursor.close()
        except self._pyodbc.Error as exc:
            logging.debug("[PyodbcDriver] free_result failed", extra={"error": _error_text(exc)})

    def set_autocommit(self, connection: Any, enabled: bool) -> None:
        try:
            connection.autocommit = enabled
        except self._pyodbc.Error as exc:
            raise self._translate(exc) from exc

    def commit(self, connection: Any) -> None:
        try:
            connection.commit()
        except self._pyodbc.Error as exc:
            raise self._translate(exc) from exc

    def rollback(self, connection: Any) -> None:
        try:
            connection.rollback()
        except self._pyodbc.Error as exc:
            raise self._translate(exc) from exc
