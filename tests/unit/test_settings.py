"""
Unit tests for application settings and the server entry point.

Tests the token expiry defaults, deadline normalization and the
uvicorn launcher.
"""

from datetime import datetime, timezone
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from graduation.api import main
from graduation.api.dependencies import get_token_issuer
from graduation.config.settings import Settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch) -> None:
    for name in ("TOKEN_EXPIRY_MODE", "TOKEN_FIXED_EXPIRY", "TOKEN_ROLLING_HOURS", "HOST", "PORT"):
        monkeypatch.delenv(name, raising=False)


class TestTokenSettings:
    """Tests for the stage token configuration."""

    def test_default_policy_issues_live_tokens(self) -> None:
        settings = Settings(_env_file=None)

        assert settings.token_expiry_mode == "rolling"
        issued = get_token_issuer(settings).issue()
        assert issued.expiry > datetime.now(timezone.utc)

    def test_naive_deadline_read_as_utc(self) -> None:
        settings = Settings(_env_file=None, token_fixed_expiry="2030-01-01T00:00:00")

        assert settings.token_fixed_expiry == datetime(2030, 1, 1, tzinfo=timezone.utc)
        assert settings.token_fixed_expiry.utcoffset().total_seconds() == 0

    def test_offset_deadline_converted_to_utc(self) -> None:
        settings = Settings(_env_file=None, token_fixed_expiry="2030-01-01T02:00:00+02:00")

        assert settings.token_fixed_expiry == datetime(2030, 1, 1, tzinfo=timezone.utc)
        assert settings.token_fixed_expiry.tzinfo == timezone.utc

    def test_naive_deadline_from_environment(self, monkeypatch) -> None:
        monkeypatch.setenv("TOKEN_EXPIRY_MODE", "fixed")
        monkeypatch.setenv("TOKEN_FIXED_EXPIRY", "2099-12-31T23:59:59")

        issued = get_token_issuer(Settings(_env_file=None)).issue()

        assert issued.expiry == datetime(2099, 12, 31, 23, 59, 59, tzinfo=timezone.utc)

    def test_past_fixed_deadline_refused(self) -> None:
        settings = Settings(
            _env_file=None, token_expiry_mode="fixed", token_fixed_expiry="2020-01-01T00:00:00Z"
        )

        with pytest.raises(ValueError, match="has passed"):
            get_token_issuer(settings)


class TestRun:
    """Tests for the graduation-api console script."""

    def test_serves_app_with_configured_address(self) -> None:
        settings = Settings(_env_file=None, host="127.0.0.1", port=9000, log_level="DEBUG")

        with (
            patch.object(main, "get_settings", return_value=settings),
            patch.object(main.uvicorn, "run") as uvicorn_run,
        ):
            main.run()

        uvicorn_run.assert_called_once_with(
            "graduation.api.main:app", host="127.0.0.1", port=9000, log_level="debug"
        )


class TestStartup:
    """Tests for the startup configuration checks."""

    def test_past_fixed_deadline_stops_startup(self) -> None:
        settings = Settings(
            _env_file=None, token_expiry_mode="fixed", token_fixed_expiry="2020-01-01T00:00:00Z"
        )

        with (
            patch.object(main, "get_settings", return_value=settings),
            patch.object(main, "ConnectionPool") as pool_cls,
        ):
            with pytest.raises(ValueError), TestClient(main.create_app()):
                pass

        pool_cls.assert_not_called()
