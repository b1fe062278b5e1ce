"""
Expose the environment configuration loader.

Example:

    from db_access.config import load_config
    print(load_config().ODBC_SERVER)
"""

from .env import Config, load_config  # noqa: F401
