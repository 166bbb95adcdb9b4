"""HTTP transport for the upstream rental broker API."""
from __future__ import annotations

from dataclasses import dataclass
import json
import logging
import time
from typing import Any, Callable, Dict, Mapping, Optional

import requests

from .config import ClientSettings

LOGGER = logging.getLogger(__name__)


class TransportError(Exception):
    """A request that did not produce a usable 2xx response body."""

    CONNECTION_FAILED = 0

    def __init__(self, message: str, status_code: int = CONNECTION_FAILED, url: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.url = url

    @property
    def is_connection_failure(self) -> bool:
        return self.status_code == self.CONNECTION_FAILED


@dataclass
class TransportResult:
    """Outcome of a single upstream call: a response body or a transport error."""

    body: Optional[str] = None
    error: Optional[TransportError] = None
    status_code: int = TransportError.CONNECTION_FAILED

    @property
    def ok(self) -> bool:
        return self.error is None and self.body is not None

    def raise_for_error(self) -> str:
        """Return the body, raising the carried :class:`TransportError` on failure."""

        if self.error is not None:
            raise self.error
        if self.body is None:
            raise TransportError("Empty result", self.status_code)
        return self.body

    @classmethod
    def success(cls, body: str, status_code: int = 200) -> "TransportResult":
        return cls(body=body, status_code=status_code)

    @classmethod
    def failure(cls, error: TransportError) -> "TransportResult":
        return cls(error=error, status_code=error.status_code)


class GarentaClient:
    """Thin wrapper around :mod:`requests` that talks to the broker API.

    Every request carries the tenant header and a browser-like header set.
    Failures are reported through :class:`TransportResult` and never raised.
    """

    def __init__(
        self,
        settings: Optional[ClientSettings] = None,
        session: Optional[requests.Session] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.settings = settings or ClientSettings()
        self.session = session or requests.Session()
        self._clock = clock

    def build_url(self, path: str) -> str:
        return self.settings.base_url.rstrip("/") + "/" + path.lstrip("/")

    def build_headers(self) -> Dict[str, str]:
        device_info = {
            "browser": "Chrome",
            "webDeviceType": "desktop",
            "os": "Windows",
            "sessionId": int(self._clock()),
        }
        return {
            "Accept": "application/json, text/plain, */*",
            "Accept-Language": self.settings.accept_language,
            "Cache-Control": "no-cache",
            "Pragma": "no-cache",
            "Priority": "u=1, i",
            "Sec-Fetch-Dest": "empty",
            "Sec-Fetch-Mode": "cors",
            "Sec-Fetch-Site": "same-site",
            "Sec-GPC": "1",
            "X-Tenant-Id": self.settings.tenant_id,
            "X-Web-Device-Info": json.dumps(device_info, separators=(",", ":")),
            "User-Agent": self.settings.user_agent,
        }

    def fetch(self, method: str, path: str, body: Optional[Mapping[str, Any]] = None) -> TransportResult:
        """Issue one request and return its body or a :class:`TransportError`."""

        url = self.build_url(path)
        method = method.upper()
        try:
            response = self.session.request(
                method,
                url,
                headers=self.build_headers(),
                json=dict(body) if body is not None else None,
                timeout=self.settings.timeout,
            )
        except requests.RequestException as exc:
            LOGGER.error("HTTP %s request failed for %s: %s", method, url, exc)
            return TransportResult.failure(
                TransportError(f"{method} {url} failed: {exc}", TransportError.CONNECTION_FAILED, url)
            )

        status = response.status_code
        text = response.text
        if 200 <= status < 300 and text:
            return TransportResult.success(text, status)

        reason = "empty body" if 200 <= status < 300 else f"HTTP {status}"
        if body is not None:
            LOGGER.error(
                "HTTP %s request failed for %s (%s). Payload: %s",
                method,
                url,
                reason,
                json.dumps(dict(body)),
            )
        else:
            LOGGER.error("HTTP %s request failed for %s (%s)", method, url, reason)
        return TransportResult.failure(TransportError(f"{method} {url} returned {reason}", status, url))

    def get(self, path: str) -> TransportResult:
        return self.fetch("GET", path)

    def post(self, path: str, payload: Mapping[str, Any]) -> TransportResult:
        return self.fetch("POST", path, payload)
