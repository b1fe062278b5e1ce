"""
Connection, statement and transaction handling over ODBC.

``DatabaseHandle`` owns at most one driver connection and at most one
open transaction.  It checks the ordering rules (no double connect, no
close while a transaction is open, no commit without a transaction...)
before delegating to an ``OdbcDriver``, and translates every driver
failure into one of the errors in ``db_access.infra.db.errors``.

Example usage::

    from db_access import DatabaseHandle

    db = DatabaseHandle("localhost", "1433", "sales", "app", "secret")
    db.connect()
    rows = db.execute_query("SELECT * FROM users WHERE age > ?", [25])
    db.begin_transaction()
    db.execute_mutation("UPDATE accounts SET balance = balance - ? WHERE id = ?", [100, 1])
    db.commit_transaction()
    db.close()

The handle also works as a context manager, connecting on entry and
closing on exit unless a transaction was left open.

A handle is not thread safe.  Use one handle, and so one connection,
per thread or unit of work.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence, Type, Union

from .config import DEFAULT_DRIVER, ConnectionConfig
from .driver import OdbcDriver, PyodbcDriver
from .errors import (
    AlreadyConnectedError,
    AutocommitRestoreError,
    ConnectionError,
    DatabaseError,
    DisconnectionError,
    DriverError,
    MutationExecutionError,
    NoActiveTransactionError,
    NotConnectedError,
    QueryExecutionError,
    TransactionActiveError,
    TransactionAlreadyActiveError,
    TransactionCommitError,
    TransactionRollbackError,
    TransactionStartError,
)


class DatabaseHandle:
    """Single ODBC connection with explicit transaction control."""

    def __init__(
        self,
        server: str,
        port: Union[str, int],
        database: str,
        username: str,
        password: str,
        driver: str = DEFAULT_DRIVER,
        *,
        timeout: int = 0,
        odbc: Optional[OdbcDriver] = None,
    ) -> None:
        self._connection: Any = None
        self._in_transaction = False
        self._config = ConnectionConfig(
            server=server,
            port=port,
            database=database,
            username=username,
            password=password,
            driver=driver,
            timeout=timeout,
        )
        self._odbc = odbc

    @classmethod
    def from_config(cls, config: ConnectionConfig, odbc: Optional[OdbcDriver] = None) -> "DatabaseHandle":
        return cls(
            config.server,
            config.port,
            config.database,
            config.username,
            config.password,
            config.driver,
            timeout=config.timeout,
            odbc=odbc,
        )

    @property
    def config(self) -> ConnectionConfig:
        return self._config

    @property
    def driver(self) -> OdbcDriver:
        if self._odbc is None:
            self._odbc = PyodbcDriver(timeout=self._config.timeout)
        return self._odbc

    # ------------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------------

    def connect(self) -> None:
        """Open the connection.

        Raises:
            AlreadyConnectedError: If the handle is already connected.
            ConnectionError: If the driver cannot connect.
        """
        if self._connection is not None:
            raise AlreadyConnectedError("A connection is already open")

        logging.debug(
            "[DB] connect",
            extra={"server": self._config.server, "database": self._config.database},
        )
        try:
            connection = self.driver.connect(
                self._config.descriptor,
                self._config.username,
                self._config.password,
            )
        except DriverError as exc:
            raise ConnectionError("Could not connect to the database", exc.message) from exc

        self._connection = connection

    def close(self) -> None:
        """Close the connection.

        Raises:
            NotConnectedError: If there is no connection to close.
            TransactionActiveError: If a transaction is still open.
            DisconnectionError: If the driver fails to close the connection.
        """
        if self._connection is None:
            raise NotConnectedError("There is no open connection to close")

        if self._in_transaction:
            raise TransactionActiveError(
                "Cannot close the connection while a transaction is active; commit or roll back first"
            )

        logging.debug("[DB] close", extra={"database": self._config.database})
        try:
            self.driver.close(self._connection)
        except DriverError as exc:
            raise DisconnectionError("Error closing the connection", exc.message) from exc

        self._connection = None

    def is_connected(self) -> bool:
        return self._connection is not None

    def is_in_transaction(self) -> bool:
        return self._in_transaction

    def _ensure_connection(self) -> None:
        if self._connection is None:
            raise NotConnectedError("No open connection; call connect() first")

    # ------------------------------------------------------------------
    # Statement execution
    # ------------------------------------------------------------------

    def _run(
        self,
        sql: str,
        parameters: Optional[Sequence[Any]],
        error_cls: Type[DatabaseError],
        label: str,
    ) -> Any:
        """Execute ``sql`` directly, or prepared when there are parameters."""
        self._ensure_connection()
        odbc = self.driver

        logging.debug(
            f"[DB] {label} executing",
            extra={"sql": sql, "param_count": len(parameters) if parameters else 0},
        )
        if not parameters:
            try:
                return odbc.execute_immediate(self._connection, sql)
            except DriverError as exc:
                raise error_cls(f"Error executing the {label}", exc.message) from exc

        try:
            statement = odbc.prepare(self._connection, sql)
        except DriverError as exc:
            raise error_cls(f"Error preparing the {label}", exc.message) from exc

        try:
            return odbc.execute(statement, list(parameters))
        except DriverError as exc:
            raise error_cls(f"Error executing the prepared {label}", exc.message) from exc

    def execute_query(self, sql: str, parameters: Optional[Sequence[Any]] = None) -> List[Dict[str, Any]]:
        """Run a SELECT-style statement and return every row.

        Args:
            sql: The SQL text, with ``?`` placeholders when ``parameters``
                is given.
            parameters: Positional values bound to the placeholders, in
                order.  Their number is not checked here; a mismatch is
                reported by the driver.

        Returns:
            A list of rows, each a mapping from column name to value.

        Raises:
            NotConnectedError: If the handle is not connected.
            QueryExecutionError: If preparing, executing or fetching fails.
        """
        result = self._run(sql, parameters, QueryExecutionError, "query")
        odbc = self.driver

        rows: List[Dict[str, Any]] = []
        try:
            while True:
                row = odbc.fetch_row_as_mapping(result)
                if row is None:
                    break
                rows.append(row)
        except DriverError as exc:
            raise QueryExecutionError("Error fetching query results", exc.message) from exc
        finally:
            odbc.free_result(result)

        logging.debug("[DB] query returned rows", extra={"count": len(rows)})
        return rows

    def execute_mutation(self, sql: str, parameters: Optional[Sequence[Any]] = None) -> int:
        """Run an INSERT, UPDATE or DELETE and return the affected row count.

        Raises:
            NotConnectedError: If the handle is not connected.
            MutationExecutionError: If preparing or executing fails.
        """
        result = self._run(sql, parameters, MutationExecutionError, "statement")
        odbc = self.driver
        try:
            affected = odbc.affected_row_count(result)
        except DriverError as exc:
            raise MutationExecutionError("Error reading the affected row count", exc.message) from exc
        finally:
            odbc.free_result(result)

        logging.debug("[DB] statement affected rows", extra={"count": affected})
        return affected

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def begin_transaction(self) -> None:
        """Disable autocommit and open a transaction.

        Raises:
            NotConnectedError: If the handle is not connected.
            TransactionAlreadyActiveError: If a transaction is already open.
            TransactionStartError: If the driver refuses to disable autocommit.
        """
        self._ensure_connection()

        if self._in_transaction:
            raise TransactionAlreadyActiveError("A transaction is already active")

        try:
            self.driver.set_autocommit(self._connection, False)
        except DriverError as exc:
            raise TransactionStartError("Error starting the transaction", exc.message) from exc

        self._in_transaction = True
        logging.debug("[DB] transaction started")

    def commit_transaction(self) -> None:
        """Commit the open transaction and restore autocommit.

        If the commit fails the transaction stays open, so the caller may
        retry or roll back.

        Raises:
            NotConnectedError: If the handle is not connected.
            NoActiveTransactionError: If no transaction is open.
            TransactionCommitError: If the driver commit fails.
            AutocommitRestoreError: If autocommit cannot be re-enabled.  The
                transaction stays open until a retried commit or
                rollback restores autocommit.
        """
        self._end_transaction(commit=True)

    def rollback_transaction(self) -> None:
        """Roll back the open transaction and restore autocommit.

        Raises:
            NotConnectedError: If the handle is not connected.
            NoActiveTransactionError: If no transaction is open.
            TransactionRollbackError: If the driver rollback fails.
            AutocommitRestoreError: If autocommit cannot be re-enabled.  The
                transaction stays open until a retried commit or
                rollback restores autocommit.
        """
        self._end_transaction(commit=False)

    def _end_transaction(self, commit: bool) -> None:
        self._ensure_connection()
        action = "commit" if commit else "roll back"

        if not self._in_transaction:
            raise NoActiveTransactionError(f"There is no active transaction to {action}")

        odbc = self.driver
        try:
            if commit:
                odbc.commit(self._connection)
            else:
                odbc.rollback(self._connection)
        except DriverError as exc:
            error_cls = TransactionCommitError if commit else TransactionRollbackError
            raise error_cls(f"Error trying to {action} the transaction", exc.message) from exc

        # the connection is still in manual-commit mode until autocommit is back
        try:
            odbc.set_autocommit(self._connection, True)
        except DriverError as exc:
            raise AutocommitRestoreError("Error restoring autocommit", exc.message) from exc

        self._in_transaction = False
        logging.debug("[DB] transaction finished", extra={"action": action})

    # ------------------------------------------------------------------
    # Scoped release
    # ------------------------------------------------------------------

    def _release(self, origin: str) -> None:
        if self._connection is None:
            return
        if self._in_transaction:
            logging.warning(
                f"[DB] {origin} with an open transaction; connection left open",
                extra={"database": self._config.database},
            )
            return
        self.close()

    def __enter__(self) -> "DatabaseHandle":
        if self._connection is None:
            self.connect()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self._release("leaving scope")
            return
        # keep the body's exception as the one the caller sees
        try:
            self._release("leaving scope after an error")
        except DisconnectionError as close_exc:
            logging.debug("[DB] close on scope exit failed", extra={"error": close_exc.diagnostic})

    def __del__(self) -> None:
        if getattr(self, "_connection", None) is None:
            return
        try:
            self._release("handle discarded")
        except DisconnectionError as exc:
            logging.debug("[DB] close on discard failed", extra={"error": exc.diagnostic})

    def __repr__(self) -> str:
        state = "connected" if self.is_connected() else "disconnected"
        if self._in_transaction:
            state += ", in transaction"
        return f"<DatabaseHandle {self._config.server}/{self._config.database} ({state})>"
