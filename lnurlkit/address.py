"""
Address and URL parsing shared by the pay, callback and auth flows.

- parse_url: strict absolute-URL check (scheme + valid host)
- parse_lightning_address: ``user@domain`` per LUD-16
- decode_lnurl / to_lnurl: bech32 ``lnurl1...`` strings (LUD-01)
"""

from __future__ import annotations

import ipaddress
import re
from urllib.parse import SplitResult, urlsplit

import bech32

from lnurlkit import LNURL_BECH32_PREFIX, LNURL_HRP
from lnurlkit.errors import InvalidAddress
from lnurlkit.types import LightningAddress, LnUrl

# Hostname labels: letters, digits, hyphen, underscore
_HOST_RE = re.compile(r"^[a-z0-9_-]+(\.[a-z0-9_-]+)*\.?$")

# LUD-16 username charset
_USER_RE = re.compile(r"^[a-z0-9\-_.+]+$")

_LIGHTNING_SCHEME = "lightning:"


def _is_valid_host(host: str) -> bool:
    if ":" in host:
        try:
            ipaddress.IPv6Address(host)
            return True
        except ValueError:
            return False
    return bool(_HOST_RE.match(host))


def parse_url(value: str) -> SplitResult:
    """Parse an absolute URL. Raises InvalidAddress if it is not one."""
    if not isinstance(value, str) or not value:
        raise InvalidAddress(f"Invalid URL: {value!r}")
    try:
        parts = urlsplit(value)
        parts.port  # raises ValueError on a non-numeric port
    except ValueError as e:
        raise InvalidAddress(f"Invalid URL: {value!r}") from e
    if not parts.scheme or not parts.netloc or not parts.hostname:
        raise InvalidAddress(f"Invalid URL: {value!r}")
    if not _is_valid_host(parts.hostname):
        raise InvalidAddress(f"Invalid host in URL: {parts.hostname!r}")
    return parts


def parse_lightning_address(address: str) -> LightningAddress:
    """Parse ``user@domain``. Raises InvalidAddress on malformed input."""
    if not isinstance(address, str):
        raise InvalidAddress(f"Invalid Lightning Address: {address!r}")
    value = address.strip()
    if value.lower().startswith(_LIGHTNING_SCHEME):
        value = value[len(_LIGHTNING_SCHEME):]
    parts = value.split("@")
    if len(parts) != 2:
        raise InvalidAddress(f"Invalid Lightning Address: {address!r}")
    user, domain = parts[0].lower(), parts[1].lower()
    if not _USER_RE.match(user) or not domain or not _is_valid_host(domain):
        raise InvalidAddress(f"Invalid Lightning Address: {address!r}")
    return LightningAddress(user=user, domain=domain)


def decode_lnurl(lnurl: str) -> str:
    """Decode a bech32 ``lnurl1...`` string into its URL.

    LNURLs routinely exceed the 90-character limit of segwit addresses, so
    the checksum is verified directly rather than through bech32_decode.
    Raises ValueError on a bad encoding or checksum.
    """
    if lnurl.lower() != lnurl and lnurl.upper() != lnurl:
        raise ValueError("Mixed-case bech32 string")
    value = lnurl.lower()
    pos = value.rfind("1")
    if pos < 1 or pos + 7 > len(value):
        raise ValueError("Missing bech32 separator or checksum")
    hrp = value[:pos]
    if hrp != LNURL_HRP:
        raise ValueError(f"Unexpected human-readable part: {hrp!r}")
    if not all(c in bech32.CHARSET for c in value[pos + 1:]):
        raise ValueError("Invalid bech32 character")
    data = [bech32.CHARSET.find(c) for c in value[pos + 1:]]
    if not bech32.bech32_verify_checksum(hrp, data):
        raise ValueError("Bad bech32 checksum")
    decoded = bech32.convertbits(data[:-6], 5, 8, False)
    if decoded is None:
        raise ValueError("Invalid bech32 padding")
    return bytes(decoded).decode("utf-8")


def to_lnurl(callback: str) -> LnUrl:
    """Normalize a callback into an LnUrl.

    ``lnurl1...`` strings are bech32-decoded (InvalidAddress on failure);
    anything else is wrapped as-is.
    """
    if callback.lower().startswith(LNURL_BECH32_PREFIX):
        try:
            return LnUrl(url=decode_lnurl(callback))
        except (ValueError, UnicodeDecodeError) as e:
            raise InvalidAddress(f"Invalid LNURL: {e}") from e
    return LnUrl(url=callback)


def is_lnurl_address(value: str) -> bool:
    """True if ``value`` is a Lightning Address or a bech32 LNURL."""
    if not isinstance(value, str):
        return False
    candidate = value.strip()
    if candidate.lower().startswith(_LIGHTNING_SCHEME):
        candidate = candidate[len(_LIGHTNING_SCHEME):]
    if candidate.lower().startswith(LNURL_BECH32_PREFIX):
        try:
            parse_url(decode_lnurl(candidate))
        except (ValueError, UnicodeDecodeError, InvalidAddress):
            return False
        return True
    try:
        parse_lightning_address(candidate)
    except InvalidAddress:
        return False
    return True
