"""
lnurlkit CLI — LNURL client operations from the command line.

Commands:
  lnurlkit invoice      - Fetch an invoice for a Lightning Address
  lnurlkit channel-url  - Build a channelRequest callback URL
  lnurlkit withdraw-url - Build a withdrawRequest callback URL
  lnurlkit auth         - Perform an LNURL-auth login
  lnurlkit derive-path  - Show the LUD-05 linking key path for a domain
  lnurlkit check        - Check whether a string is a Lightning Address / LNURL
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from pathlib import Path
from typing import NoReturn


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )


def _fail(message: str) -> NoReturn:
    print(f"Error: {message}", file=sys.stderr)
    sys.exit(1)


def _add_key_args(parser: argparse.ArgumentParser) -> None:
    """Add hashing key flags to a subparser.

    SECURITY: the hashing key is NOT accepted via CLI args (visible in ps/proc).
    Use --key-file, or set LNURLKIT_HASHING_KEY env var (hex).
    """
    parser.add_argument("--key-file", help="File containing the 32-byte hashing key as hex")


def _load_hashing_key(args: argparse.Namespace) -> bytes:
    """Read the hashing key. Priority: --key-file > LNURLKIT_HASHING_KEY."""
    key_file = getattr(args, "key_file", None)
    if key_file:
        path = Path(key_file)
        if not path.is_file():
            _fail(f"Key file not found: {key_file}")
        hex_key = path.read_text().strip()
    else:
        hex_key = os.environ.get("LNURLKIT_HASHING_KEY", "").strip()
    if not hex_key:
        _fail("No hashing key. Use --key-file or set LNURLKIT_HASHING_KEY.")
    try:
        key = bytes.fromhex(hex_key)
    except ValueError:
        _fail("Hashing key is not valid hex")
    if len(key) != 32:
        _fail("Hashing key must be 32 bytes (64 hex chars)")
    return key


def cmd_invoice(args: argparse.Namespace) -> None:
    """Fetch an invoice for a Lightning Address."""
    from lnurlkit.errors import LnurlError
    from lnurlkit.pay import get_lnurl_invoice
    from lnurlkit.types import LightningAddressInvoice

    try:
        invoice = asyncio.run(get_lnurl_invoice(args.address, args.amount))
    except LnurlError as e:
        _fail(str(e))

    if args.json:
        result = LightningAddressInvoice(
            address=args.address,
            amount_satoshis=args.amount,
            invoice=invoice,
        )
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print(invoice)


def cmd_channel_url(args: argparse.Namespace) -> None:
    """Build a channelRequest callback URL."""
    from lnurlkit.callbacks import create_channel_request_url
    from lnurlkit.errors import LnurlError
    from lnurlkit.types import ChannelRequestParams

    params = ChannelRequestParams(
        k1=args.k1,
        callback=args.callback,
        local_node_id=args.node_id,
        is_private=args.private,
        cancel=args.cancel,
    )
    try:
        print(create_channel_request_url(params))
    except LnurlError as e:
        _fail(str(e))


def cmd_withdraw_url(args: argparse.Namespace) -> None:
    """Build a withdrawRequest callback URL."""
    from lnurlkit.callbacks import create_withdraw_callback_url
    from lnurlkit.errors import LnurlError
    from lnurlkit.types import WithdrawCallbackParams

    params = WithdrawCallbackParams(
        k1=args.k1,
        callback=args.callback,
        payment_request=args.pr,
    )
    try:
        print(create_withdraw_callback_url(params))
    except LnurlError as e:
        _fail(str(e))


def cmd_auth(args: argparse.Namespace) -> None:
    """Perform an LNURL-auth login."""
    from lnurlkit.auth import lnurl_auth
    from lnurlkit.errors import LnurlError
    from lnurlkit.types import LnurlAuthParams

    params = LnurlAuthParams(
        domain=args.domain,
        k1=args.k1,
        callback=args.callback,
        hashing_key=_load_hashing_key(args),
    )
    try:
        print(asyncio.run(lnurl_auth(params)))
    except LnurlError as e:
        _fail(str(e))


def cmd_derive_path(args: argparse.Namespace) -> None:
    """Show the LUD-05 linking key path for a domain."""
    from lnurlkit.errors import LnurlError
    from lnurlkit.keys import get_derivation_path

    key = _load_hashing_key(args)
    try:
        print(get_derivation_path(key, f"https://{args.domain}"))
    except LnurlError as e:
        _fail(str(e))


def cmd_check(args: argparse.Namespace) -> None:
    """Check whether a value is a Lightning Address or LNURL. Exit 1 if not."""
    from lnurlkit.address import is_lnurl_address

    if is_lnurl_address(args.value):
        print("yes")
    else:
        print("no")
        sys.exit(1)


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="lnurlkit",
        description="LNURL client — Lightning Address invoices, callbacks and LNURL-auth.",
    )
    from lnurlkit import __version__
    parser.add_argument("--version", action="version", version=f"lnurlkit {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command")

    # invoice
    p_inv = sub.add_parser("invoice", help="Fetch an invoice for a Lightning Address")
    p_inv.add_argument("address", help="Lightning Address (user@domain)")
    p_inv.add_argument("amount", type=int, help="Amount in satoshis")
    p_inv.add_argument("--json", action="store_true", help="Print address, amount and invoice as JSON")

    # channel-url
    p_ch = sub.add_parser("channel-url", help="Build a channelRequest callback URL")
    p_ch.add_argument("callback", help="Callback URL from the channelRequest")
    p_ch.add_argument("--k1", required=True, help="Challenge k1 from the channelRequest")
    p_ch.add_argument("--node-id", required=True, help="Local node public key (remoteid)")
    p_ch.add_argument("--private", action="store_true", help="Request a private channel")
    p_ch.add_argument("--cancel", action="store_true", help="Cancel the channel request")

    # withdraw-url
    p_wd = sub.add_parser("withdraw-url", help="Build a withdrawRequest callback URL")
    p_wd.add_argument("callback", help="Callback URL from the withdrawRequest")
    p_wd.add_argument("--k1", required=True, help="Challenge k1 from the withdrawRequest")
    p_wd.add_argument("--pr", required=True, help="bolt11 invoice to be paid")

    # auth
    p_auth = sub.add_parser("auth", help="Perform an LNURL-auth login")
    p_auth.add_argument("domain", help="Service domain")
    p_auth.add_argument("k1", help="Hex challenge from the service")
    p_auth.add_argument("callback", help="Callback URL or bech32 LNURL")
    _add_key_args(p_auth)

    # derive-path
    p_dp = sub.add_parser("derive-path", help="Show the LUD-05 linking key path")
    p_dp.add_argument("domain", help="Service domain")
    _add_key_args(p_dp)

    # check
    p_chk = sub.add_parser("check", help="Check a Lightning Address / LNURL")
    p_chk.add_argument("value", help="String to check")

    args = parser.parse_args()
    _configure_logging(args.verbose)

    if not args.command:
        print("lnurlkit — LNURL client operations")
        print()
        print("Usage:")
        print("  lnurlkit invoice alice@example.com 1000")
        print("  lnurlkit channel-url <callback> --k1 ... --node-id ... [--private] [--cancel]")
        print("  lnurlkit withdraw-url <callback> --k1 ... --pr lnbc...")
        print("  lnurlkit auth <domain> <k1> <callback> --key-file key.hex")
        print("  lnurlkit derive-path <domain> --key-file key.hex")
        print("  lnurlkit check <value>")
        print()
        print("Run 'lnurlkit <command> --help' for details on any command.")
        sys.exit(0)

    commands = {
        "invoice": cmd_invoice,
        "channel-url": cmd_channel_url,
        "withdraw-url": cmd_withdraw_url,
        "auth": cmd_auth,
        "derive-path": cmd_derive_path,
        "check": cmd_check,
    }

    commands[args.command](args)


if __name__ == "__main__":
    main()
