"""
Linking key derivation and signing for LNURL-auth.

- LUD-05 derivation path: HMAC-SHA256(hashing_key, host) → m/138'/a/b/c/d
- BIP32 private derivation: bip_utils (Bip32Slip10Secp256k1)
- ECDSA: RFC6979 deterministic, low-S, DER encoded (secp256k1 C bindings)

Requires bip_utils and secp256k1 (C bindings) for key material. Will raise
ImportError if either is unavailable — install with: pip install lnurlkit[auth]

All failures on key material raise ValueError. Nothing here caches or logs
keys.
"""

from __future__ import annotations

import hashlib
import hmac

from lnurlkit import HARDENED_OFFSET, HASHING_KEY_SIZE, LNURL_AUTH_PURPOSE
from lnurlkit.address import parse_url


def _import_secp256k1():
    """Import secp256k1 C bindings. Raises ImportError if unavailable."""
    try:
        import secp256k1
        return secp256k1
    except ImportError:
        raise ImportError(
            "secp256k1 is required for LNURL-auth signing. "
            "Install with: pip install lnurlkit[auth]"
        )


def _import_bip_utils():
    """Import bip_utils. Raises ImportError if unavailable."""
    try:
        import bip_utils
        return bip_utils
    except ImportError:
        raise ImportError(
            "bip_utils is required for LNURL-auth key derivation. "
            "Install with: pip install lnurlkit[auth]"
        )


def _load_private_key(raw: bytes):
    lib = _import_secp256k1()
    try:
        return lib.PrivateKey(raw, raw=True)
    except Exception as e:
        raise ValueError("Invalid secp256k1 private key") from e


# ---------------------------------------------------------------------------
# Derivation path (LUD-05)
# ---------------------------------------------------------------------------

class DerivationPath(tuple):
    """Sequence of raw BIP32 child indices.

    Indices at or above 2**31 are hardened and render as ``n'``. The
    rendered form always starts with the ``m`` master marker, e.g.
    ``m/138'/1588488367/511787106'/38110259/1988853114'``; tools that print
    LUD-05 paths without it show the same path as ``138'/...``.
    """

    def __str__(self) -> str:
        return "/".join(["m"] + [_format_index(i) for i in self])


def _format_index(index: int) -> str:
    if index >= HARDENED_OFFSET:
        return f"{index - HARDENED_OFFSET}'"
    return str(index)


def get_derivation_path(hashing_key: bytes, url: str) -> DerivationPath:
    """Compute the LUD-05 linking key path for the service at ``url``.

    The first 16 bytes of HMAC-SHA256(hashing_key, host) are read as four
    big-endian u32 values and appended to ``138'``. Pure function of its
    inputs.
    """
    if len(hashing_key) != HASHING_KEY_SIZE:
        raise ValueError(f"hashing_key must be {HASHING_KEY_SIZE} bytes")
    host = parse_url(url).hostname
    mac = hmac.new(hashing_key, host.encode("utf-8"), hashlib.sha256).digest()
    indices = [int.from_bytes(mac[i:i + 4], "big") for i in range(0, 16, 4)]
    return DerivationPath([LNURL_AUTH_PURPOSE + HARDENED_OFFSET] + indices)


# ---------------------------------------------------------------------------
# BIP32
# ---------------------------------------------------------------------------

def _bip32_context(seed: bytes, path):
    lib = _import_bip_utils()
    try:
        ctx = lib.Bip32Slip10Secp256k1.FromSeed(seed)
        if not path:
            return ctx
        return ctx.DerivePath(str(DerivationPath(path)))
    except (lib.Bip32KeyError, lib.Bip32PathError, ValueError) as e:
        raise ValueError(f"BIP32 derivation failed: {e}") from e


def derive_private_key(seed: bytes, path=()) -> bytes:
    """Raw 32-byte private key at ``path`` below the master key of ``seed``.

    ``path`` holds raw indices: values >= 2**31 derive hardened.
    """
    return _bip32_context(seed, path).PrivateKey().Raw().ToBytes()


def derive_chain_code(seed: bytes, path=()) -> bytes:
    return _bip32_context(seed, path).ChainCode().ToBytes()


# ---------------------------------------------------------------------------
# ECDSA
# ---------------------------------------------------------------------------

def public_key(private_key: bytes) -> bytes:
    """Compressed (33-byte) public key for a raw private key."""
    return _load_private_key(private_key).pubkey.serialize(compressed=True)


def sign_digest(private_key: bytes, digest: bytes) -> bytes:
    """Deterministic ECDSA signature over a 32-byte digest, DER encoded."""
    if len(digest) != 32:
        raise ValueError("Digest must be 32 bytes")
    key = _load_private_key(private_key)
    sig = key.ecdsa_sign(digest, raw=True)
    return key.ecdsa_serialize(sig)


def verify_signature(pubkey: bytes, digest: bytes, signature: bytes) -> bool:
    """Verify a DER ECDSA signature. Returns False on any failure."""
    lib = _import_secp256k1()
    try:
        pk = lib.PublicKey(pubkey, raw=True)
        sig = pk.ecdsa_deserialize(signature)
        return pk.ecdsa_verify(digest, sig, raw=True)
    except Exception:
        return False
