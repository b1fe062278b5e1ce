"""
ODBC database access.

This subpackage wraps an ODBC driver behind ``DatabaseHandle``, which
exposes ``connect``/``close``, ``execute_query``/``execute_mutation``
and explicit transaction control.  ``get_database`` builds a handle from
the environment configuration.
"""

from .config import ConnectionConfig, DEFAULT_DRIVER  # noqa: F401
from .driver import OdbcDriver, PyodbcDriver  # noqa: F401
from .odbc import DatabaseHandle  # noqa: F401
from .connection_factory import get_database  # noqa: F401
