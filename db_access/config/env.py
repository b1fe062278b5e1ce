"""
Environment configuration loader.

Reads the ODBC connection settings from environment variables (and a
``.env`` file, via ``python-dotenv``) into a ``Config`` dataclass.
Required variables raise a ``ValueError`` if missing.

Supported variables:

* ``ODBC_SERVER`` – host name or IP of the database server.
* ``ODBC_PORT`` – server port (default ``'1433'``).
* ``ODBC_DATABASE`` – database name.
* ``ODBC_USERNAME`` – database user.
* ``ODBC_PASSWORD`` – password for the user (default empty).
* ``ODBC_DRIVER`` – ODBC driver name (default
  ``'ODBC Driver 17 for SQL Server'``).
* ``ODBC_TIMEOUT`` – login timeout in seconds (default ``0``, the
  driver default).

Nothing is read at import time; call ``load_config``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from ..infra.db.config import DEFAULT_DRIVER, ConnectionConfig


@dataclass
class Config:
    """Holds environment configuration for the application."""

    ODBC_SERVER: str
    ODBC_DATABASE: str
    ODBC_USERNAME: str
    ODBC_PASSWORD: str = field(default="", repr=False)
    ODBC_PORT: str = "1433"
    ODBC_DRIVER: str = DEFAULT_DRIVER
    ODBC_TIMEOUT: int = 0

    def connection_config(self) -> ConnectionConfig:
        return ConnectionConfig(
            server=self.ODBC_SERVER,
            port=self.ODBC_PORT,
            database=self.ODBC_DATABASE,
            username=self.ODBC_USERNAME,
            password=self.ODBC_PASSWORD,
            driver=self.ODBC_DRIVER,
            timeout=self.ODBC_TIMEOUT,
        )


def load_config() -> Config:
    """Load configuration from environment variables.

    Raises:
        ValueError: If a required environment variable is missing or empty.

    Returns:
        Config: A populated configuration dataclass.
    """
    load_dotenv()

    def _require(name: str) -> str:
        value = os.environ.get(name)
        if not value:
            raise ValueError(f"Environment variable {name} is required")
        return value

    def _int(name: str, default: int) -> int:
        value = os.environ.get(name)
        if not value:
            return default
        try:
            return int(value)
        except ValueError:
            raise ValueError(f"Environment variable {name} must be an integer, got {value!r}") from None

    return Config(
        ODBC_SERVER=_require("ODBC_SERVER"),
        ODBC_DATABASE=_require("ODBC_DATABASE"),
        ODBC_USERNAME=_require("ODBC_USERNAME"),
        ODBC_PASSWORD=os.environ.get("ODBC_PASSWORD", ""),
        ODBC_PORT=os.environ.get("ODBC_PORT", "1433"),
        ODBC_DRIVER=os.environ.get("ODBC_DRIVER") or DEFAULT_DRIVER,
        ODBC_TIMEOUT=_int("ODBC_TIMEOUT", 0),
    )
