#!/usr/bin/env python3
"""
Tests for connection settings and environment loading.
"""

import dataclasses
import os
import unittest
from unittest.mock import patch

from db_access import get_database
from db_access.config import Config, load_config
from db_access.infra.db import DEFAULT_DRIVER, ConnectionConfig
from db_access.infra.db.errors import ConfigurationError

from tests.helpers.fake_driver import FakeDriver


class TestConnectionConfig(unittest.TestCase):
    """Test cases for ConnectionConfig."""

    def test_descriptor_format(self):
        config = ConnectionConfig("db.local", "1433", "sales", "app", "secret", "ODBC Driver 18 for SQL Server")
        self.assertEqual(
            config.descriptor,
            "DRIVER={ODBC Driver 18 for SQL Server};SERVER=db.local,1433;DATABASE=sales;",
        )

    def test_descriptor_without_port(self):
        config = ConnectionConfig("db.local", "", "sales", "app")
        self.assertEqual(config.descriptor, f"DRIVER={{{DEFAULT_DRIVER}}};SERVER=db.local;DATABASE=sales;")

    def test_integer_port_normalised(self):
        self.assertEqual(ConnectionConfig("h", 1433, "d", "u").port, "1433")

    def test_descriptor_never_contains_credentials(self):
        config = ConnectionConfig("h", "1433", "d", "u", "hunter2")
        self.assertNotIn("hunter2", config.descriptor)
        self.assertNotIn("hunter2", repr(config))

    def test_immutable(self):
        config = ConnectionConfig("h", "1433", "d", "u")
        with self.assertRaises(dataclasses.FrozenInstanceError):
            config.server = "other"

    def test_required_fields(self):
        for args in (("", "1", "d", "u"), ("h", "1", "", "u"), ("h", "1", "d", ""), ("h", "1", None, "u")):
            with self.subTest(args=args):
                with self.assertRaises(ConfigurationError):
                    ConnectionConfig(*args)

    def test_configuration_error_is_value_error(self):
        with self.assertRaises(ValueError):
            ConnectionConfig("", "1433", "d", "u")


class TestLoadConfig(unittest.TestCase):
    """Test cases for environment loading."""

    ENV = {
        "ODBC_SERVER": "db.local",
        "ODBC_DATABASE": "sales",
        "ODBC_USERNAME": "app",
        "ODBC_PASSWORD": "secret",
    }

    @patch("db_access.config.env.load_dotenv")
    def test_defaults(self, _load_dotenv):
        with patch.dict(os.environ, self.ENV, clear=True):
            config = load_config()
        self.assertEqual(config.ODBC_PORT, "1433")
        self.assertEqual(config.ODBC_DRIVER, DEFAULT_DRIVER)
        self.assertEqual(config.ODBC_PASSWORD, "secret")
        self.assertEqual(config.ODBC_TIMEOUT, 0)

    @patch("db_access.config.env.load_dotenv")
    def test_timeout_reaches_connection_config(self, _load_dotenv):
        with patch.dict(os.environ, dict(self.ENV, ODBC_TIMEOUT="20"), clear=True):
            config = load_config()
        self.assertEqual(config.ODBC_TIMEOUT, 20)
        self.assertEqual(config.connection_config().timeout, 20)

    @patch("db_access.config.env.load_dotenv")
    def test_non_integer_timeout_rejected(self, _load_dotenv):
        with patch.dict(os.environ, dict(self.ENV, ODBC_TIMEOUT="soon"), clear=True):
            with self.assertRaises(ValueError) as ctx:
                load_config()
        self.assertIn("ODBC_TIMEOUT", str(ctx.exception))

    @patch("db_access.config.env.load_dotenv")
    def test_missing_required_variable(self, _load_dotenv):
        for name in ("ODBC_SERVER", "ODBC_DATABASE", "ODBC_USERNAME"):
            env = {k: v for k, v in self.ENV.items() if k != name}
            with self.subTest(name=name), patch.dict(os.environ, env, clear=True):
                with self.assertRaises(ValueError) as ctx:
                    load_config()
                self.assertIn(name, str(ctx.exception))

    def test_connection_config_from_env_config(self):
        config = Config(ODBC_SERVER="h", ODBC_DATABASE="d", ODBC_USERNAME="u", ODBC_PORT="1434")
        connection = config.connection_config()
        self.assertEqual(connection.descriptor, f"DRIVER={{{DEFAULT_DRIVER}}};SERVER=h,1434;DATABASE=d;")

    def test_get_database_builds_unconnected_handle(self):
        driver = FakeDriver()
        db = get_database(Config(ODBC_SERVER="h", ODBC_DATABASE="d", ODBC_USERNAME="u"), odbc=driver)
        self.assertFalse(db.is_connected())
        self.assertEqual(driver.calls, [])
        db.connect()
        self.assertEqual(driver.called("connect")[0][2], "u")
        db.close()

    @patch("db_access.config.env.load_dotenv")
    def test_get_database_loads_environment(self, _load_dotenv):
        with patch.dict(os.environ, self.ENV, clear=True):
            db = get_database(odbc=FakeDriver())
        self.assertEqual(db.config.server, "db.local")
        self.assertEqual(db.config.password, "secret")


if __name__ == "__main__":
    unittest.main()
