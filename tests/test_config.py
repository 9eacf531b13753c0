"""Tests for runtime configuration."""
import pytest

from infraseal.core.config import InfraSealConfig, get_config, set_config
from infraseal.core.errors import ConfigurationError, InfraSealError
from infraseal.core.state import MAX_STATE_DEPTH


def test_defaults(monkeypatch):
    monkeypatch.delenv("INFRASEAL_MAX_DEPTH", raising=False)
    monkeypatch.delenv("INFRASEAL_POLICY", raising=False)
    monkeypatch.delenv("INFRASEAL_LOG_FILE", raising=False)

    config = InfraSealConfig.from_env()

    assert config.max_depth == MAX_STATE_DEPTH
    assert config.policy_file is None
    assert config.log_file is None


def test_from_env(monkeypatch):
    monkeypatch.setenv("INFRASEAL_MAX_DEPTH", "16")
    monkeypatch.setenv("INFRASEAL_POLICY", "/etc/infraseal/policy.yml")

    config = InfraSealConfig.from_env()

    assert config.max_depth == 16
    assert config.policy_file == "/etc/infraseal/policy.yml"


def test_global_config_is_cached(monkeypatch):
    set_config(None)
    monkeypatch.setenv("INFRASEAL_MAX_DEPTH", "8")
    try:
        first = get_config()
        monkeypatch.setenv("INFRASEAL_MAX_DEPTH", "9")
        assert get_config() is first
        assert first.max_depth == 8
    finally:
        set_config(None)


def test_non_integer_max_depth(monkeypatch):
    monkeypatch.setenv("INFRASEAL_MAX_DEPTH", "deep")

    with pytest.raises(ConfigurationError, match="INFRASEAL_MAX_DEPTH") as exc_info:
        InfraSealConfig.from_env()
    assert isinstance(exc_info.value, InfraSealError)


def test_empty_max_depth_uses_default(monkeypatch):
    monkeypatch.setenv("INFRASEAL_MAX_DEPTH", "")

    assert InfraSealConfig.from_env().max_depth == MAX_STATE_DEPTH
