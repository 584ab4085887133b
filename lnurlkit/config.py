"""
Client configuration.

Sources (later wins):
    1. DEFAULT_CONFIG
    2. ~/.lnurlkit/config.toml
    3. LNURLKIT_PROXY / LNURLKIT_TIMEOUT environment variables
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

from lnurlkit import CLIENT_DEFAULT_TIMEOUT, CLIENT_USER_AGENT

log = logging.getLogger(__name__)

DEFAULT_CONFIG: dict[str, Any] = {
    "timeout": CLIENT_DEFAULT_TIMEOUT,
    "proxy": "",
    "user_agent": CLIENT_USER_AGENT,
    "allow_insecure": False,  # permit plain http:// outside .onion
}

_DEFAULT_CONFIG_PATH = Path.home() / ".lnurlkit" / "config.toml"


def load_config(config_path: Path | None = None) -> dict[str, Any]:
    """Load client config from TOML file and environment, falling back to defaults."""
    config = dict(DEFAULT_CONFIG)

    path = Path(config_path) if config_path else _DEFAULT_CONFIG_PATH
    if path.is_file():
        try:
            import tomllib
        except ImportError:
            try:
                import tomli as tomllib
            except ImportError:
                log.warning("tomllib/tomli not available, ignoring %s", path)
                tomllib = None

        if tomllib is not None:
            try:
                with open(path, "rb") as f:
                    file_config = tomllib.load(f)
                config.update(
                    {k: v for k, v in file_config.items() if k in DEFAULT_CONFIG}
                )
            except Exception as e:
                log.warning("Failed to load config from %s: %s", path, e)

    proxy = os.environ.get("LNURLKIT_PROXY", "").strip()
    if proxy:
        config["proxy"] = proxy

    timeout = os.environ.get("LNURLKIT_TIMEOUT", "").strip()
    if timeout:
        try:
            config["timeout"] = float(timeout)
        except ValueError:
            log.warning("Ignoring invalid LNURLKIT_TIMEOUT=%r", timeout)

    return config
