"""
Tests for the LNURL client and its configuration — response parsing, URL
safety, error bodies, client construction, TOML/env config.
"""

from __future__ import annotations

import httpx
import pytest

from lnurlkit.client import LnurlClient, LnurlClientError, create_client
from lnurlkit.config import DEFAULT_CONFIG, load_config
from lnurlkit.errors import ClientCreationFailed
from lnurlkit.types import (
    ChannelResponse,
    LnUrl,
    PayResponse,
    UnknownResponse,
    WithdrawResponse,
)


def _client(body, status_code: int = 200, **kwargs) -> LnurlClient:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, json=body)

    return LnurlClient(transport=httpx.MockTransport(handler), **kwargs)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    """Keep the user's config file and env out of the tests."""
    monkeypatch.setattr("lnurlkit.config._DEFAULT_CONFIG_PATH", tmp_path / "missing.toml")
    monkeypatch.delenv("LNURLKIT_PROXY", raising=False)
    monkeypatch.delenv("LNURLKIT_TIMEOUT", raising=False)


# ---------------------------------------------------------------------------
# TestMakeRequest
# ---------------------------------------------------------------------------

class TestMakeRequest:

    @pytest.mark.asyncio
    async def test_pay_request(self):
        body = {
            "tag": "payRequest",
            "callback": "https://b.com/cb",
            "minSendable": "1000",
            "maxSendable": 5000,
            "metadata": "[]",
            "commentAllowed": 140,
        }
        async with _client(body) as client:
            resp = await client.make_request("https://b.com/.well-known/lnurlp/a")
        assert resp == PayResponse(
            callback="https://b.com/cb",
            min_sendable=1000,
            max_sendable=5000,
            metadata="[]",
            comment_allowed=140,
        )

    @pytest.mark.asyncio
    async def test_withdraw_request(self):
        body = {
            "tag": "withdrawRequest",
            "callback": "https://b.com/withdraw?session=1",
            "k1": "abcdef",
            "defaultDescription": "Withdraw",
            "minWithdrawable": 10_000,
            "maxWithdrawable": 100_000,
        }
        async with _client(body) as client:
            resp = await client.make_request("https://b.com/lnurlw")
        assert isinstance(resp, WithdrawResponse)
        assert resp.k1 == "abcdef"
        assert resp.max_withdrawable == 100_000

    @pytest.mark.asyncio
    async def test_channel_request(self):
        body = {
            "tag": "channelRequest",
            "uri": "03abc@1.2.3.4:9735",
            "callback": "https://b.com/channel",
            "k1": "ff",
        }
        async with _client(body) as client:
            resp = await client.make_request("https://b.com/lnurlc")
        assert resp == ChannelResponse(uri="03abc@1.2.3.4:9735", callback="https://b.com/channel", k1="ff")

    @pytest.mark.asyncio
    async def test_unknown_tag(self):
        async with _client({"tag": "hostedChannelRequest", "k1": "x"}) as client:
            resp = await client.make_request("https://b.com/x")
        assert isinstance(resp, UnknownResponse)
        assert resp.tag == "hostedChannelRequest"
        assert resp.payload["k1"] == "x"

    @pytest.mark.asyncio
    async def test_error_status_raises(self):
        async with _client({"status": "ERROR", "reason": "no such user"}) as client:
            with pytest.raises(LnurlClientError, match="no such user"):
                await client.make_request("https://b.com/.well-known/lnurlp/a")

    @pytest.mark.asyncio
    async def test_non_json_body(self):
        def handler(request):
            return httpx.Response(200, text="<html>hi</html>")

        async with LnurlClient(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(LnurlClientError, match="Invalid JSON"):
                await client.make_request("https://b.com/x")

    @pytest.mark.asyncio
    async def test_json_array_body(self):
        async with _client([1, 2, 3]) as client:
            with pytest.raises(LnurlClientError):
                await client.make_request("https://b.com/x")

    @pytest.mark.asyncio
    async def test_insecure_url_refused(self):
        async with _client({"tag": "payRequest"}) as client:
            with pytest.raises(LnurlClientError, match="insecure"):
                await client.make_request("http://b.com/x")

    @pytest.mark.asyncio
    async def test_insecure_callback_refused(self):
        body = {"tag": "payRequest", "callback": "http://b.com/cb", "minSendable": 1, "maxSendable": 2}
        async with _client(body) as client:
            with pytest.raises(LnurlClientError, match="insecure"):
                await client.make_request("https://b.com/x")

    @pytest.mark.asyncio
    async def test_onion_and_allow_insecure(self):
        body = {"tag": "payRequest", "callback": "http://b.com/cb", "minSendable": 1, "maxSendable": 2}
        async with _client(body, allow_insecure=True) as client:
            resp = await client.make_request("http://b.com/x")
        assert resp.callback == "http://b.com/cb"

        onion = dict(body, callback="http://abc.onion/cb")
        async with _client(onion) as client:
            resp = await client.make_request("http://abc.onion/x")
        assert resp.callback == "http://abc.onion/cb"

    @pytest.mark.asyncio
    async def test_redirect_to_cleartext_refused(self):
        requests = []
        pay = {"tag": "payRequest", "callback": "https://b.com/cb", "minSendable": 1, "maxSendable": 2}

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(str(request.url))
            if request.url.host == "b.com":
                return httpx.Response(302, headers={"Location": "http://evil.example/x"})
            return httpx.Response(200, json=pay)

        async with LnurlClient(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(LnurlClientError, match="insecure"):
                await client.make_request("https://b.com/.well-known/lnurlp/a")
        assert requests == ["https://b.com/.well-known/lnurlp/a"]

    @pytest.mark.asyncio
    async def test_redirect_between_https_hosts_followed(self):
        pay = {"tag": "payRequest", "callback": "https://c.com/cb", "minSendable": 1, "maxSendable": 2}

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.host == "b.com":
                return httpx.Response(302, headers={"Location": "https://c.com/lnurlp/a"})
            return httpx.Response(200, json=pay)

        async with LnurlClient(transport=httpx.MockTransport(handler)) as client:
            resp = await client.make_request("https://b.com/.well-known/lnurlp/a")
        assert resp.callback == "https://c.com/cb"


# ---------------------------------------------------------------------------
# TestGetInvoiceAndAuth
# ---------------------------------------------------------------------------

class TestGetInvoiceAndAuth:

    @pytest.mark.asyncio
    async def test_comment_appended(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"pr": "lnbc1x"})

        pay = PayResponse(callback="https://b.com/cb?amount=5", min_sendable=1, max_sendable=10**9)
        async with LnurlClient(transport=httpx.MockTransport(handler)) as client:
            assert await client.get_invoice(pay, 2000, comment="thanks") == "lnbc1x"
        params = seen[0].url.params
        assert params.get_list("amount") == ["2000"]
        assert params["comment"] == "thanks"

    @pytest.mark.asyncio
    async def test_auth_ok(self):
        async with _client({"status": "OK"}) as client:
            resp = await client.lnurl_auth(LnUrl("https://b.com/auth?k1=aa"), b"\x30\x01", b"\x02" * 33)
        assert resp.ok

    @pytest.mark.asyncio
    async def test_auth_error_keeps_reason(self):
        async with _client({"status": "ERROR", "reason": "nope"}, status_code=403) as client:
            resp = await client.lnurl_auth(LnUrl("https://b.com/auth?k1=aa"), b"\x30", b"\x02")
        assert not resp.ok
        assert resp.reason == "nope"

    @pytest.mark.asyncio
    async def test_auth_http_error_without_body(self):
        def handler(request):
            return httpx.Response(500, text="oops")

        async with LnurlClient(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(LnurlClientError, match="HTTP 500"):
                await client.lnurl_auth(LnUrl("https://b.com/auth"), b"\x30", b"\x02")

    @pytest.mark.asyncio
    async def test_auth_malformed_url(self):
        async with _client({"status": "OK"}) as client:
            with pytest.raises(LnurlClientError):
                await client.lnurl_auth(LnUrl("not a url"), b"\x30", b"\x02")


# ---------------------------------------------------------------------------
# TestConfig
# ---------------------------------------------------------------------------

class TestConfig:

    def test_defaults(self, tmp_path):
        assert load_config(tmp_path / "nope.toml") == DEFAULT_CONFIG

    def test_toml_file(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text('timeout = 5.5\nallow_insecure = true\nunknown_key = 1\n')
        config = load_config(path)
        assert config["timeout"] == 5.5
        assert config["allow_insecure"] is True
        assert "unknown_key" not in config

    def test_broken_toml_falls_back(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text("timeout = = =")
        assert load_config(path) == DEFAULT_CONFIG

    def test_env_overrides(self, tmp_path, monkeypatch):
        path = tmp_path / "config.toml"
        path.write_text('proxy = "socks5://127.0.0.1:9050"\n')
        monkeypatch.setenv("LNURLKIT_PROXY", "http://127.0.0.1:8080")
        monkeypatch.setenv("LNURLKIT_TIMEOUT", "12")
        config = load_config(path)
        assert config["proxy"] == "http://127.0.0.1:8080"
        assert config["timeout"] == 12.0

    def test_invalid_env_timeout_ignored(self, tmp_path, monkeypatch):
        monkeypatch.setenv("LNURLKIT_TIMEOUT", "soon")
        assert load_config(tmp_path / "nope.toml")["timeout"] == DEFAULT_CONFIG["timeout"]


# ---------------------------------------------------------------------------
# TestCreateClient
# ---------------------------------------------------------------------------

class TestCreateClient:

    @pytest.mark.asyncio
    async def test_default(self, tmp_path):
        client = create_client(config_path=tmp_path / "missing.toml")
        assert isinstance(client, LnurlClient)
        await client.aclose()

    def test_bad_proxy(self, monkeypatch, tmp_path):
        monkeypatch.setenv("LNURLKIT_PROXY", "ftp-ish://nowhere")
        with pytest.raises(ClientCreationFailed):
            create_client(config_path=tmp_path / "missing.toml")

    def test_bad_timeout_in_file(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text('timeout = "later"\n')
        with pytest.raises(ClientCreationFailed):
            create_client(config_path=path)
