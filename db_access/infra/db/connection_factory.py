"""
Database handle factory.

Builds an unconnected ``DatabaseHandle`` from the environment settings
described in ``db_access.config.env``.  Callers own the returned
handle and must ``connect()`` and ``close()`` it themselves.
"""

from __future__ import annotations

from typing import Optional

from ...config import Config, load_config
from .driver import OdbcDriver
from .odbc import DatabaseHandle


def get_database(config: Optional[Config] = None, odbc: Optional[OdbcDriver] = None) -> DatabaseHandle:
    """Create a new ``DatabaseHandle``.

    Args:
        config: Settings to use; loaded from the environment when omitted.
        odbc: Driver implementation; ``PyodbcDriver`` when omitted.

    Raises:
        ValueError: If a required environment variable is missing.
        ConfigurationError: If server, database or username is empty.
    """
    if config is None:
        config = load_config()
    return DatabaseHandle.from_config(config.connection_config(), odbc=odbc)
