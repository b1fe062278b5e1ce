"""
Thin wrapper around an ODBC client API.

Provides ``DatabaseHandle`` for connecting, running parameterized
queries and statements, and controlling transactions, with every
failure reported as a typed ``DatabaseError``.  See
``db_access.infra.db.odbc`` for details.
"""

from .infra.db import ConnectionConfig, DatabaseHandle, get_database  # noqa: F401
from .infra.db.errors import *  # noqa: F401,F403

__version__ = "1.0.0"
