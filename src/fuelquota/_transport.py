"""JSON-over-HTTP transport to the fuel quota backend."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from fuelquota._constants import USER_AGENT
from fuelquota._redact import redact_for_log
from fuelquota.config import FuelQuotaConfig
from fuelquota.exceptions import TransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    ``request`` returns the HTTP status and the decoded JSON body (or
    ``None`` for an empty body).  It raises :class:`TransportError` only
    for failures where no HTTP response was obtained or the body was
    not JSON; status handling is left to the caller.
    """

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        payload: Mapping[str, Any] | None = None,
        params: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> tuple[int, Any]:
        ...


class HttpTransport:
    """aiohttp implementation of :class:`Transport`.

    Every request carries the configured total timeout.  Nothing is
    retried: a timed-out dispense may or may not have been applied on
    the backend, so the decision belongs to the operator.
    """

    def __init__(self, config: FuelQuotaConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        payload: Mapping[str, Any] | None = None,
        params: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> tuple[int, Any]:
        url = f"{self._config.base_url}{endpoint}"
        request_headers: dict[str, str] = {
            "accept": "application/json",
            "user-agent": USER_AGENT,
        }
        if headers:
            request_headers.update(headers)
        body: str | None = None
        if payload is not None:
            body = json.dumps(payload, separators=(",", ":"))
            request_headers["content-type"] = "application/json; charset=UTF-8"

        _logger.debug("%s %s", method, url)
        if self._config.api_trace_enabled:
            _logger.debug("Request body for %s: %s", endpoint, redact_for_log(payload))

        try:
            async with self._http.request(
                method,
                url,
                data=body,
                params=params,
                headers=request_headers,
                timeout=self._timeout,
            ) as resp:
                status = resp.status
                text = await resp.text()
        except TimeoutError as exc:
            raise TransportError(
                f"Request to {endpoint} timed out after {self._config.request_timeout}s",
                endpoint=endpoint,
            ) from exc
        except aiohttp.ClientError as exc:
            raise TransportError(f"Request to {endpoint} failed: {exc}", endpoint=endpoint) from exc

        if not text.strip():
            return status, None
        try:
            decoded = json.loads(text)
        except json.JSONDecodeError as exc:
            raise TransportError(
                f"Invalid JSON from {endpoint} (HTTP {status}): {text[:200]}",
                status_code=status,
                endpoint=endpoint,
            ) from exc

        if self._config.api_trace_enabled:
            _logger.debug("Response from %s (HTTP %d): %s", endpoint, status, redact_for_log(decoded))
        return status, decoded
