"""
Callback URL construction for channelRequest (LUD-02) and withdrawRequest (LUD-03).

Both builders clear the query and rebuild it: caller-supplied parameters
first, in their original order, then the flow's reserved parameters in a
fixed order. Feeding a builder its own output replaces the reserved values
instead of accumulating duplicates.
"""

from __future__ import annotations

from urllib.parse import parse_qsl, urlencode, urlunsplit

from lnurlkit.address import parse_url
from lnurlkit.types import ChannelRequestParams, WithdrawCallbackParams


def _flag(value: bool) -> str:
    return "1" if value else "0"


def merge_query_params(url: str, reserved: list[tuple[str, str]]) -> str:
    """Replace the ``reserved`` parameters on ``url``, keeping all others.

    Raises InvalidAddress if ``url`` is not an absolute URL.
    """
    parts = parse_url(url)
    names = {name for name, _ in reserved}
    kept = [
        (name, value)
        for name, value in parse_qsl(parts.query, keep_blank_values=True)
        if name not in names
    ]
    query = urlencode(kept + list(reserved))
    return urlunsplit((parts.scheme, parts.netloc, parts.path or "/", query, parts.fragment))


def create_channel_request_url(params: ChannelRequestParams) -> str:
    """Build the channelRequest callback: ``k1``, ``remoteid``, ``private``, ``cancel``."""
    return merge_query_params(params.callback, [
        ("k1", params.k1),
        ("remoteid", params.local_node_id),
        ("private", _flag(params.is_private)),
        ("cancel", _flag(params.cancel)),
    ])


def create_withdraw_callback_url(params: WithdrawCallbackParams) -> str:
    """Build the withdrawRequest callback: ``k1``, ``pr``."""
    return merge_query_params(params.callback, [
        ("k1", params.k1),
        ("pr", params.payment_request),
    ])
