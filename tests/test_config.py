"""Tests for environment-derived configuration."""

import json

import pytest

from core.config import AppSettings, write_user_env_vars
from core.errors import ConfigurationError


def _settings() -> AppSettings:
    return AppSettings(_env_file=None)


def test_platform_credentials_from_environment(monkeypatch):
    monkeypatch.setenv("CF_API", "https://api.example.com/")
    monkeypatch.setenv("CF_USER", "admin")
    monkeypatch.setenv("CF_PASSWORD", "secret")

    creds = _settings().require_platform()

    assert creds.api_url == "https://api.example.com"
    assert creds.username == "admin"
    assert creds.password == "secret"


def test_api_url_from_vcap_application(monkeypatch):
    monkeypatch.setenv("VCAP_APPLICATION", json.dumps({"application_name": "placements", "cf_api": "https://api.sys.example"}))

    assert _settings().resolve_api_url() == "https://api.sys.example"


def test_cf_api_wins_over_vcap_application(monkeypatch):
    monkeypatch.setenv("VCAP_APPLICATION", json.dumps({"cf_api": "https://api.sys.example"}))
    monkeypatch.setenv("CF_API", "https://api.override.example")

    assert _settings().resolve_api_url() == "https://api.override.example"


def test_invalid_vcap_application_is_configuration_error(monkeypatch):
    monkeypatch.setenv("VCAP_APPLICATION", "{not json")

    with pytest.raises(ConfigurationError, match="VCAP_APPLICATION"):
        _settings().resolve_api_url()


def test_missing_endpoint_is_configuration_error():
    with pytest.raises(ConfigurationError):
        _settings().resolve_api_url()


@pytest.mark.parametrize("missing", ["CF_USER", "CF_PASSWORD"])
def test_missing_credentials_are_configuration_errors(monkeypatch, missing):
    monkeypatch.setenv("CF_API", "https://api.example.com")
    for key in ("CF_USER", "CF_PASSWORD"):
        if key != missing:
            monkeypatch.setenv(key, "value")

    with pytest.raises(ConfigurationError, match=missing):
        _settings().require_platform()


def test_tuning_knobs_use_prefix(monkeypatch):
    monkeypatch.setenv("CF_PLACEMENTS_MAX_CONCURRENCY", "3")
    monkeypatch.setenv("CF_PLACEMENTS_PROCESS_TYPE", "worker")
    monkeypatch.setenv("PORT", "9090")

    settings = _settings()

    assert settings.max_concurrency == 3
    assert settings.process_type == "worker"
    assert settings.port == 9090
    assert settings.skip_tls_validation is True


def test_write_user_env_vars_merges_existing(tmp_path):
    env_path = tmp_path / "cfg" / ".env"
    env_path.parent.mkdir()
    env_path.write_text("# old\nCF_USER=old\nCF_PLACEMENTS_LOG_LEVEL=DEBUG\n", encoding="utf-8")

    write_user_env_vars({"CF_USER": "new", "CF_API": "https://api.example.com"}, env_path=env_path)

    lines = env_path.read_text(encoding="utf-8").splitlines()
    assert lines[0].startswith("#")
    assert lines[1:] == [
        "CF_API=https://api.example.com",
        "CF_PLACEMENTS_LOG_LEVEL=DEBUG",
        "CF_USER=new",
    ]
