"""
Async LNURL client over httpx.

Performs the HTTP round trips for the pay, withdraw, channel and auth flows
and parses LNURL JSON replies into lnurlkit.types objects. Every failure
raises LnurlClientError; callers translate it into their own error kinds.

Usage:
    async with create_client() as client:
        pay = await client.make_request(address.lnurlp_url)
        pr = await client.get_invoice(pay, 21_000)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit

import httpx

from lnurlkit import CLIENT_DEFAULT_TIMEOUT, CLIENT_USER_AGENT
from lnurlkit.address import parse_url
from lnurlkit.callbacks import merge_query_params
from lnurlkit.config import load_config
from lnurlkit.errors import ClientCreationFailed, InvalidAddress
from lnurlkit.types import (
    CallbackResponse,
    ChannelResponse,
    LnUrl,
    PayResponse,
    UnknownResponse,
    WithdrawResponse,
)

log = logging.getLogger(__name__)

LnurlResponse = PayResponse | WithdrawResponse | ChannelResponse | UnknownResponse


class LnurlClientError(Exception):
    """Error talking to, or returned by, an LNURL service."""


def _host(url: str) -> str:
    return urlsplit(url).hostname or "?"


class LnurlClient:
    """Single-use async LNURL client. Close it, or use it as a context manager."""

    def __init__(
        self,
        timeout: float = CLIENT_DEFAULT_TIMEOUT,
        proxy: str | None = None,
        user_agent: str = CLIENT_USER_AGENT,
        allow_insecure: bool = False,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._allow_insecure = allow_insecure
        self._http = httpx.AsyncClient(
            timeout=timeout,
            proxy=proxy or None,
            headers={"User-Agent": user_agent, "Accept": "application/json"},
            follow_redirects=True,
            event_hooks={"request": [self._check_request]},
            transport=transport,
        )

    async def __aenter__(self) -> LnurlClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _check_url(self, url: str) -> None:
        """Reject malformed URLs and cleartext URLs outside Tor."""
        try:
            parts = parse_url(url)
        except InvalidAddress as e:
            raise LnurlClientError(str(e)) from e
        if self._allow_insecure:
            return
        if parts.scheme == "https" or parts.hostname.endswith(".onion"):
            return
        raise LnurlClientError(
            f"Refusing insecure LNURL URL (must be https:// or .onion): {parts.hostname}"
        )

    async def _check_request(self, request: httpx.Request) -> None:
        # runs for every redirect hop, not only the first URL
        self._check_url(str(request.url))

    async def _get_json(self, url: str) -> dict[str, Any]:
        """GET ``url`` and return the JSON object body.

        Non-2xx replies are accepted only if they carry an LNURL error object.
        """
        self._check_url(url)
        host = _host(url)
        try:
            resp = await self._http.get(url)
        except httpx.HTTPError as e:
            raise LnurlClientError(f"Request to {host} failed: {e}") from e

        try:
            body = resp.json()
        except ValueError:
            body = None

        if resp.is_error:
            if isinstance(body, dict) and str(body.get("status", "")).upper() == "ERROR":
                return body
            raise LnurlClientError(f"HTTP {resp.status_code} from {host}")
        if not isinstance(body, dict):
            raise LnurlClientError(f"Invalid JSON response from {host}")

        log.debug("LNURL response from %s (tag=%s)", host, body.get("tag", "-"))
        return body

    @staticmethod
    def _raise_for_error(body: dict[str, Any]) -> None:
        if str(body.get("status", "")).upper() == "ERROR":
            raise LnurlClientError(
                f"LNURL service error: {body.get('reason', '<missing reason>')}"
            )

    def _callback(self, body: dict[str, Any]) -> str:
        callback = body.get("callback")
        if not isinstance(callback, str):
            raise LnurlClientError("Missing 'callback' field in LNURL response")
        self._check_url(callback)
        return callback

    # ------------------------------------------------------------------
    # LNURL operations
    # ------------------------------------------------------------------

    async def make_request(self, url: str) -> LnurlResponse:
        """Fetch and parse the LNURL endpoint at ``url``."""
        body = await self._get_json(url)
        self._raise_for_error(body)
        tag = body.get("tag", "")
        try:
            if tag == "payRequest":
                return PayResponse(
                    callback=self._callback(body),
                    min_sendable=int(body["minSendable"]),
                    max_sendable=int(body["maxSendable"]),
                    metadata=str(body.get("metadata", "")),
                    comment_allowed=int(body.get("commentAllowed") or 0),
                )
            if tag == "withdrawRequest":
                return WithdrawResponse(
                    callback=self._callback(body),
                    k1=str(body["k1"]),
                    default_description=str(body.get("defaultDescription", "")),
                    min_withdrawable=int(body.get("minWithdrawable") or 0),
                    max_withdrawable=int(body["maxWithdrawable"]),
                )
            if tag == "channelRequest":
                return ChannelResponse(
                    uri=str(body["uri"]),
                    callback=self._callback(body),
                    k1=str(body["k1"]),
                )
        except (KeyError, TypeError, ValueError) as e:
            raise LnurlClientError(f"Malformed {tag} response: {e!r}") from e
        return UnknownResponse(tag=str(tag), payload=body)

    async def get_invoice(
        self,
        pay: PayResponse,
        amount_msat: int,
        comment: str | None = None,
    ) -> str:
        """Request a bolt11 invoice for ``amount_msat`` from a payRequest callback."""
        params = [("amount", str(amount_msat))]
        if comment:
            params.append(("comment", comment))
        self._check_url(pay.callback)
        body = await self._get_json(merge_query_params(pay.callback, params))
        self._raise_for_error(body)
        pr = body.get("pr")
        if not isinstance(pr, str) or not pr:
            raise LnurlClientError("No payment request in LNURL response")
        return pr

    async def lnurl_auth(
        self,
        lnurl: LnUrl,
        signature: bytes,
        public_key: bytes,
    ) -> CallbackResponse:
        """Submit a signed LNURL-auth challenge (LUD-04)."""
        self._check_url(lnurl.url)
        url = merge_query_params(lnurl.url, [
            ("sig", signature.hex()),
            ("key", public_key.hex()),
        ])
        body = await self._get_json(url)
        status = str(body.get("status", "")).upper()
        if status == "OK":
            return CallbackResponse(status="OK")
        if status == "ERROR":
            return CallbackResponse(status="ERROR", reason=str(body.get("reason", "")))
        raise LnurlClientError(f"Unexpected LNURL-auth response status: {status!r}")


def create_client(
    config_path: Path | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> LnurlClient:
    """Build an LnurlClient from configuration.

    Raises ClientCreationFailed if the configuration cannot produce a client
    (e.g. a malformed proxy URL).
    """
    config = load_config(config_path)
    try:
        return LnurlClient(
            timeout=float(config["timeout"]),
            proxy=config["proxy"] or None,
            user_agent=str(config["user_agent"]),
            allow_insecure=bool(config["allow_insecure"]),
            transport=transport,
        )
    except (ValueError, TypeError, httpx.InvalidURL) as e:
        raise ClientCreationFailed(f"Could not create LNURL client: {e}") from e
