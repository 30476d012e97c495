# infra/version.py
from __future__ import annotations

import os
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as distribution_version

DISTRIBUTION_NAME = "site-ledger"
PRODUCT_NAME = "SiteLedger"
_UNINSTALLED_VERSION = "0.0.0+local"


def get_app_version() -> str:
    """Installed distribution version; SITELEDGER_APP_VERSION wins when set."""
    env_override = (os.getenv("SITELEDGER_APP_VERSION") or "").strip()
    if env_override:
        return env_override
    try:
        return distribution_version(DISTRIBUTION_NAME)
    except PackageNotFoundError:
        return _UNINSTALLED_VERSION


def generator_label() -> str:
    """Stamped into exported workbooks and PDFs as the producing application."""
    return f"{PRODUCT_NAME} {get_app_version()}"


__all__ = ["DISTRIBUTION_NAME", "PRODUCT_NAME", "generator_label", "get_app_version"]
