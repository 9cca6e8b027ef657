# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import logging
import unittest
from unittest.mock import patch

import managedhttp
from managedhttp import ApiClient, ClientSettings, setup_logging
from managedhttp.http.adapters import TransportFactory


class TestManagedHttpPackage(unittest.TestCase):
    def test_public_exports(self):
        for name in ("ApiClient", "ApiRequest", "QueryParameter", "SerializerResolver", "HttpStatusError"):
            self.assertIn(name, managedhttp.__all__)
            self.assertTrue(hasattr(managedhttp, name))
        self.assertEqual(managedhttp.__version__, "1.0.0")

    def test_context_manager_closes_client_and_handler(self):
        factory = TransportFactory()
        with ApiClient(settings=ClientSettings(), handler_factory=factory) as client:
            with client.acquire() as transport:
                self.assertFalse(transport.is_closed)

        self.assertTrue(client.closed)
        self.assertTrue(transport.is_closed)
        self.assertTrue(factory.latest.closed)

    def test_setup_logging_uses_requested_level(self):
        with patch("managedhttp.log.logging.basicConfig") as basic_config:
            setup_logging("debug")
        basic_config.assert_called_once()
        self.assertEqual(basic_config.call_args.kwargs["level"], logging.DEBUG)

    def test_setup_logging_falls_back_on_unknown_level(self):
        with patch("managedhttp.log.logging.basicConfig") as basic_config:
            setup_logging("chatty")
        self.assertEqual(basic_config.call_args.kwargs["level"], logging.WARNING)


if __name__ == "__main__":
    unittest.main()
