"""
Connection settings for an ODBC data source.

``ConnectionConfig`` validates the settings once, at construction, and
builds the ODBC connection descriptor handed to the driver.  The
descriptor has the form used by the Microsoft SQL Server ODBC drivers::

    DRIVER={ODBC Driver 17 for SQL Server};SERVER=host,1433;DATABASE=db;

Credentials are kept apart from the descriptor and passed to the driver
separately.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from .errors import ConfigurationError

DEFAULT_DRIVER = "ODBC Driver 17 for SQL Server"


@dataclass(frozen=True)
class ConnectionConfig:
    """Immutable connection settings.

    ``timeout`` is the login timeout in seconds passed to the driver;
    ``0`` leaves it to the driver default.

    Raises:
        ConfigurationError: If ``server``, ``database`` or ``username``
            is empty.
    """

    server: str
    port: Union[str, int]
    database: str
    username: str
    password: str = field(default="", repr=False)
    driver: str = DEFAULT_DRIVER
    timeout: int = 0

    def __post_init__(self) -> None:
        if not self.server or not self.database or not self.username:
            raise ConfigurationError(
                "server, database and username are required to build an ODBC connection"
            )
        # frozen dataclass: normalise through object.__setattr__
        object.__setattr__(self, "port", "" if self.port is None else str(self.port))
        object.__setattr__(self, "password", self.password or "")
        object.__setattr__(self, "driver", self.driver or DEFAULT_DRIVER)
        object.__setattr__(self, "timeout", int(self.timeout or 0))

    @property
    def descriptor(self) -> str:
        server_expr = f"{self.server},{self.port}" if self.port else self.server
        return (
            f"DRIVER={{{self.driver}}};"
            f"SERVER={server_expr};"
            f"DATABASE={self.database};"
        )
