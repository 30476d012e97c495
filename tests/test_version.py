from __future__ import annotations

from importlib.metadata import PackageNotFoundError

from infra import version as version_mod


def test_env_override_wins_over_installed_version(monkeypatch):
    monkeypatch.setattr(version_mod, "distribution_version", lambda name: "1.0.0")
    monkeypatch.setenv("SITELEDGER_APP_VERSION", "  9.9.9 ")

    assert version_mod.get_app_version() == "9.9.9"
    assert version_mod.generator_label() == "SiteLedger 9.9.9"


def test_installed_distribution_version_is_used(monkeypatch):
    looked_up = []

    def _lookup(name):
        looked_up.append(name)
        return "1.4.0"

    monkeypatch.setattr(version_mod, "distribution_version", _lookup)

    assert version_mod.get_app_version() == "1.4.0"
    assert looked_up == ["site-ledger"]


def test_source_checkout_without_metadata_gets_local_version(monkeypatch):
    def _missing(name):
        raise PackageNotFoundError(name)

    monkeypatch.setattr(version_mod, "distribution_version", _missing)

    assert version_mod.get_app_version() == "0.0.0+local"
    assert version_mod.generator_label() == "SiteLedger 0.0.0+local"
