"""Tests for AppConfig validation and layer normalization."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from kwikresolver.infrastructure.config.load import _deep_merge, _normalize_layer
from kwikresolver.infrastructure.config.schema import AppConfig, EnvOverrides


class TestAppConfig:
    def test_sectioned_input(self) -> None:
        config = AppConfig.model_validate(
            {
                "http": {"timeout_seconds": 10},
                "resolver": {"max_attempts": 4, "retry_delay_seconds": 0},
            }
        )
        assert config.http_timeout_seconds == 10.0
        assert config.resolver_max_attempts == 4
        assert config.resolver_retry_delay_seconds == 0.0

    def test_flat_input(self) -> None:
        config = AppConfig(resolver_max_attempts=2)
        assert config.resolver_max_attempts == 2

    @pytest.mark.parametrize(
        "data",
        [
            {"http_timeout_seconds": 0},
            {"resolver_max_attempts": 0},
            {"resolver_retry_delay_seconds": -1},
            {"environment": "staging"},
            {"log_level": "TRACE"},
        ],
    )
    def test_invalid_values_rejected(self, data: dict) -> None:
        with pytest.raises(ValidationError):
            AppConfig.model_validate(data)

    def test_explicit_log_format_kept(self) -> None:
        config = AppConfig(environment="prod", log_format="console")
        assert config.log_format == "console"


class TestEnvOverrides:
    def test_only_set_values(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in ("KWIKRESOLVER_LOG_LEVEL", "KWIKRESOLVER_APP_NAME"):
            monkeypatch.delenv(name, raising=False)
        monkeypatch.setenv("KWIKRESOLVER_RESOLVER_RETRY_DELAY_SECONDS", "0.5")

        update = EnvOverrides().to_update_dict()
        assert update["resolver_retry_delay_seconds"] == 0.5
        assert "log_level" not in update
        assert "app_name" not in update


class TestNormalizeLayer:
    def test_flat_keys_become_sections(self) -> None:
        layer = _normalize_layer(
            {"http_timeout_seconds": 5.0, "log_level": "DEBUG", "app_name": "x"}
        )
        assert layer == {
            "http": {"timeout_seconds": 5.0},
            "logging": {"level": "DEBUG"},
            "app_name": "x",
        }

    def test_unknown_keys_dropped(self) -> None:
        assert _normalize_layer({"plugins": {"dir": "x"}}) == {}

    def test_deep_merge(self) -> None:
        base = {"http": {"timeout_seconds": 30.0, "user_agent": "a"}}
        _deep_merge(base, {"http": {"timeout_seconds": 5.0}})
        assert base == {"http": {"timeout_seconds": 5.0, "user_agent": "a"}}
