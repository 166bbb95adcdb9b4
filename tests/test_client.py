import json
import unittest
from unittest.mock import MagicMock

import requests

from rental_core.client import GarentaClient, TransportError, TransportResult
from rental_core.config import ClientSettings


def _response(status_code: int, text: str) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    return response


class GarentaClientTests(unittest.TestCase):
    def setUp(self) -> None:
        self.session = MagicMock()
        self.client = GarentaClient(ClientSettings(), session=self.session, clock=lambda: 1700000000.5)

    def test_get_returns_body_on_success(self) -> None:
        self.session.request.return_value = _response(200, '{"data": []}')

        result = self.client.get("/GetBranchesData")

        self.assertTrue(result.ok)
        self.assertEqual(result.body, '{"data": []}')
        args, kwargs = self.session.request.call_args
        self.assertEqual(args, ("GET", "https://apigw.garenta.com.tr/GetBranchesData"))
        self.assertIsNone(kwargs["json"])
        self.assertEqual(kwargs["timeout"], (10.0, 30.0))

    def test_headers_carry_tenant_and_device_info(self) -> None:
        headers = self.client.build_headers()

        self.assertEqual(headers["X-Tenant-Id"], "4cdb69b2-f39b-4f2f-8302-b6198501bcc9")
        self.assertEqual(headers["Accept-Language"], "tr")
        self.assertEqual(headers["Cache-Control"], "no-cache")
        self.assertIn("Chrome", headers["User-Agent"])
        device_info = json.loads(headers["X-Web-Device-Info"])
        self.assertEqual(device_info["sessionId"], 1700000000)
        self.assertEqual(device_info["webDeviceType"], "desktop")

    def test_post_sends_json_payload(self) -> None:
        self.session.request.return_value = _response(201, '{"data": {"vehicles": []}}')

        result = self.client.post("Search", {"branchId": "b-1"})

        self.assertTrue(result.ok)
        args, kwargs = self.session.request.call_args
        self.assertEqual(args, ("POST", "https://apigw.garenta.com.tr/Search"))
        self.assertEqual(kwargs["json"], {"branchId": "b-1"})

    def test_non_2xx_is_reported_with_status(self) -> None:
        self.session.request.return_value = _response(503, "Service Unavailable")

        with self.assertLogs("rental_core.client", level="ERROR"):
            result = self.client.get("/GetBranchesData")

        self.assertFalse(result.ok)
        self.assertIsInstance(result.error, TransportError)
        self.assertEqual(result.error.status_code, 503)
        self.assertEqual(result.status_code, 503)

    def test_empty_body_is_a_failure(self) -> None:
        self.session.request.return_value = _response(200, "")

        with self.assertLogs("rental_core.client", level="ERROR"):
            result = self.client.post("/Search", {"branchId": "b-1"})

        self.assertFalse(result.ok)
        self.assertEqual(result.error.status_code, 200)

    def test_connection_errors_do_not_raise(self) -> None:
        for exc in (requests.ConnectionError("refused"), requests.Timeout("slow")):
            with self.subTest(exc=type(exc).__name__):
                self.session.request.side_effect = exc
                with self.assertLogs("rental_core.client", level="ERROR"):
                    result = self.client.get("/GetBranchesData")
                self.assertFalse(result.ok)
                self.assertTrue(result.error.is_connection_failure)

    def test_base_url_without_trailing_slash(self) -> None:
        client = GarentaClient(ClientSettings(base_url="https://example.test/api"), session=self.session)
        self.assertEqual(client.build_url("/Search"), "https://example.test/api/Search")


class TransportResultTests(unittest.TestCase):
    def test_raise_for_error(self) -> None:
        self.assertEqual(TransportResult.success("{}").raise_for_error(), "{}")
        failure = TransportResult.failure(TransportError("boom", 500, "https://example.test"))
        with self.assertRaises(TransportError) as ctx:
            failure.raise_for_error()
        self.assertEqual(ctx.exception.status_code, 500)


if __name__ == "__main__":
    unittest.main()
