"""
LNURL-auth (LUD-04) with LUD-05 linking keys.

Sequence, one attempt per call:
    domain URL → derivation path → linking key → k1 digest → signature
    → callback normalization → submit

Key material lives only in this call's locals.
"""

from __future__ import annotations

import binascii

from lnurlkit.address import parse_url, to_lnurl
from lnurlkit.client import LnurlClientError, create_client
from lnurlkit.errors import AuthenticationFailed, RequestFailed
from lnurlkit.keys import derive_private_key, get_derivation_path, public_key, sign_digest
from lnurlkit.types import LnurlAuthParams

AUTH_SUCCESS_MESSAGE = "Authentication successful"


def _decode_k1(k1: str) -> bytes:
    try:
        digest = binascii.unhexlify(k1)
    except (binascii.Error, ValueError) as e:
        raise AuthenticationFailed("Challenge k1 is not valid hex") from e
    if len(digest) != 32:
        raise AuthenticationFailed("Challenge k1 must be 32 bytes")
    return digest


async def lnurl_auth(params: LnurlAuthParams) -> str:
    """Sign the service challenge with the domain's linking key and submit it.

    Returns a confirmation string on success. A service rejection raises
    AuthenticationFailed with the service's reason on ``server_reason``.
    """
    domain_url = f"https://{params.domain}"
    parse_url(domain_url)

    try:
        path = get_derivation_path(params.hashing_key, domain_url)
    except ValueError as e:
        raise AuthenticationFailed("Could not compute linking key path") from e

    try:
        linking_key = derive_private_key(params.hashing_key, path)
    except ValueError as e:
        raise AuthenticationFailed("Could not derive linking key") from e

    digest = _decode_k1(params.k1)

    try:
        signature = sign_digest(linking_key, digest)
        pubkey = public_key(linking_key)
    except ValueError as e:
        raise AuthenticationFailed("Could not sign challenge") from e

    lnurl = to_lnurl(params.callback)

    async with create_client() as client:
        try:
            response = await client.lnurl_auth(lnurl, signature, pubkey)
        except LnurlClientError as e:
            raise RequestFailed(str(e)) from e

    if not response.ok:
        raise AuthenticationFailed(server_reason=response.reason)
    return AUTH_SUCCESS_MESSAGE
