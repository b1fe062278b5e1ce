"""
Error taxonomy for the ODBC database handle.

Every error raised by ``DatabaseHandle`` derives from ``DatabaseError``
and carries two attributes:

* ``kind`` – an ``ErrorKind`` member identifying the failure.
* ``diagnostic`` – the driver's own error text, or ``""`` when the
  failure is a state violation detected before any driver call.

Driver implementations raise ``DriverError``; the handle translates it
into one of the caller-facing errors below and chains the original as
``__cause__``.

``ConnectionError`` intentionally shares its name with the builtin, in
the same way ``requests.exceptions.ConnectionError`` does.
"""

from __future__ import annotations

from enum import Enum

__all__ = [
    "ErrorKind",
    "DriverError",
    "DatabaseError",
    "ConfigurationError",
    "AlreadyConnectedError",
    "NotConnectedError",
    "ConnectionError",
    "DisconnectionError",
    "TransactionActiveError",
    "TransactionAlreadyActiveError",
    "NoActiveTransactionError",
    "TransactionStartError",
    "TransactionCommitError",
    "TransactionRollbackError",
    "AutocommitRestoreError",
    "QueryExecutionError",
    "MutationExecutionError",
]


class ErrorKind(str, Enum):
    CONFIGURATION = "configuration"
    ALREADY_CONNECTED = "already_connected"
    NOT_CONNECTED = "not_connected"
    CONNECTION = "connection"
    DISCONNECTION = "disconnection"
    TRANSACTION_ACTIVE = "transaction_active"
    TRANSACTION_ALREADY_ACTIVE = "transaction_already_active"
    NO_ACTIVE_TRANSACTION = "no_active_transaction"
    TRANSACTION_START = "transaction_start"
    TRANSACTION_COMMIT = "transaction_commit"
    TRANSACTION_ROLLBACK = "transaction_rollback"
    AUTOCOMMIT_RESTORE = "autocommit_restore"
    QUERY_EXECUTION = "query_execution"
    MUTATION_EXECUTION = "mutation_execution"


class DriverError(Exception):
    """Failure reported by an ODBC driver primitive."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class DatabaseError(Exception):
    """Base class for every error surfaced by ``DatabaseHandle``."""

    kind: ErrorKind

    def __init__(self, message: str, diagnostic: str = "") -> None:
        if diagnostic:
            message = f"{message}: {diagnostic}"
        super().__init__(message)
        self.diagnostic = diagnostic


class ConfigurationError(DatabaseError, ValueError):
    kind = ErrorKind.CONFIGURATION


class AlreadyConnectedError(DatabaseError):
    kind = ErrorKind.ALREADY_CONNECTED


class NotConnectedError(DatabaseError):
    kind = ErrorKind.NOT_CONNECTED


class ConnectionError(DatabaseError):  # noqa: A001
    kind = ErrorKind.CONNECTION


class DisconnectionError(DatabaseError):
    kind = ErrorKind.DISCONNECTION


class TransactionActiveError(DatabaseError):
    kind = ErrorKind.TRANSACTION_ACTIVE


class TransactionAlreadyActiveError(DatabaseError):
    kind = ErrorKind.TRANSACTION_ALREADY_ACTIVE


class NoActiveTransactionError(DatabaseError):
    kind = ErrorKind.NO_ACTIVE_TRANSACTION


class TransactionStartError(DatabaseError):
    kind = ErrorKind.TRANSACTION_START


class TransactionCommitError(DatabaseError):
    kind = ErrorKind.TRANSACTION_COMMIT


class TransactionRollbackError(DatabaseError):
    kind = ErrorKind.TRANSACTION_ROLLBACK


class AutocommitRestoreError(DatabaseError):
    kind = ErrorKind.AUTOCOMMIT_RESTORE


class QueryExecutionError(DatabaseError):
    kind = ErrorKind.QUERY_EXECUTION


class MutationExecutionError(DatabaseError):
    kind = ErrorKind.MUTATION_EXECUTION
