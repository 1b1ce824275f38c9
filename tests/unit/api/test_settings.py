"""Tests for api/settings module."""

from __future__ import annotations

from unittest.mock import patch

import pytest
from pydantic import ValidationError

from api.settings import Settings, _is_github_actions


class TestIsGitHubActions:
    """Tests for _is_github_actions function (canonical source)."""

    def test_both_signals_required(self):
        """Test that both CI=true and GITHUB_ACTIONS=true are required."""
        with patch.dict("os.environ", {"CI": "true", "GITHUB_ACTIONS": "true"}):
            assert _is_github_actions() is True

    def test_missing_ci_signal(self):
        """Test that GITHUB_ACTIONS alone is not sufficient."""
        with patch.dict("os.environ", {"GITHUB_ACTIONS": "true"}, clear=True):
            assert _is_github_actions() is False

    def test_missing_github_actions_signal(self):
        with patch.dict("os.environ", {"CI": "true"}, clear=True):
            assert _is_github_actions() is False


class TestSettingsFromEnvironment:
    def test_defaults(self):
        with patch.dict("os.environ", {}, clear=True):
            settings = Settings(_env_file=None)

        assert settings.auth_mode == "production"
        assert settings.requests_collection == "requests"
        assert settings.vacancies_collection == "vacancies"
        assert settings.projects_collection == "projects"
        assert settings.accept_pocketbase_tokens is True
        assert settings.skip_pb_auth is False

    def test_reads_environment(self):
        env = {
            "JWT_SECRET": "s3cret",
            "POCKETBASE_URL": "http://pocketbase:8090",
            "REQUESTS_COLLECTION": "join_requests",
            "SKIP_PB_AUTH": "true",
        }
        with patch.dict("os.environ", env, clear=True):
            settings = Settings(_env_file=None)

        assert settings.jwt_secret == "s3cret"
        assert settings.pocketbase_url == "http://pocketbase:8090"
        assert settings.requests_collection == "join_requests"
        assert settings.skip_pb_auth is True

    def test_allowed_origins_are_split_and_trimmed(self):
        with patch.dict("os.environ", {"ALLOWED_ORIGINS": "https://a.example, https://b.example,"}, clear=True):
            settings = Settings(_env_file=None)

        assert settings.allowed_origins == ["https://a.example", "https://b.example"]

    def test_auth_mode_is_normalized(self):
        with patch.dict("os.environ", {"AUTH_MODE": "BYPASS"}, clear=True):
            assert Settings(_env_file=None).auth_mode == "bypass"

    def test_invalid_auth_mode_rejected(self):
        with patch.dict("os.environ", {"AUTH_MODE": "open"}, clear=True):
            with pytest.raises(ValidationError):
                Settings(_env_file=None)

    @pytest.mark.parametrize(("raw", "expected"), [("true", True), ("1", True), ("yes", True), ("no", False)])
    def test_is_docker_parsing(self, raw, expected):
        with patch.dict("os.environ", {"IS_DOCKER": raw}, clear=True):
            assert Settings(_env_file=None).is_docker is expected


class TestGetEffectiveAuthMode:
    """Tests for Settings.get_effective_auth_mode method."""

    def test_non_docker_returns_configured_mode(self):
        """Test that non-Docker environments return the configured auth_mode."""
        with patch.dict("os.environ", {"AUTH_MODE": "bypass"}, clear=True):
            with patch("api.settings._is_docker_environment", return_value=False):
                settings = Settings(_env_file=None)
                assert settings.get_effective_auth_mode() == "bypass"

    def test_docker_forces_production(self):
        """Test that Docker environments force production mode (security)."""
        with patch.dict("os.environ", {"AUTH_MODE": "bypass"}, clear=True):
            with patch("api.settings._is_github_actions", return_value=False):
                settings = Settings(_env_file=None)
                settings.is_docker = True
                assert settings.get_effective_auth_mode() == "production"

    def test_docker_allows_bypass_in_github_actions(self):
        """Test that Docker + GitHub Actions allows bypass mode (for CI)."""
        with patch.dict("os.environ", {"AUTH_MODE": "bypass", "CI": "true", "GITHUB_ACTIONS": "true"}, clear=True):
            settings = Settings(_env_file=None)
            settings.is_docker = True
            assert settings.get_effective_auth_mode() == "bypass"
