"""Tests for settings and detector configuration."""

import pytest
from pydantic import ValidationError

from designproof.config import DetectorsConfig, RetryConfig, Settings


class TestSettings:
    """Test settings defaults and validation."""

    def test_defaults(self):
        """Defaults match the documented thresholds."""
        settings = Settings(_env_file=None)

        assert settings.min_confidence == 0.6
        assert settings.changed_line_tolerance == 10
        assert settings.report_only_changed
        assert settings.report_mode == "changed_code_only"
        assert settings.max_concurrency == 1
        assert settings.detectors.srp.max_methods == 7
        assert settings.detectors.dry.min_duplicates == 2
        assert settings.detectors.information_expert.tolerance == 1
        assert settings.retry.max_attempts == 5

    def test_environment_overrides(self, monkeypatch):
        """Prefixed and nested environment variables are read."""
        monkeypatch.setenv("DESIGNPROOF_MIN_CONFIDENCE", "0.75")
        monkeypatch.setenv("DESIGNPROOF_REPORT_ONLY_CHANGED", "false")
        monkeypatch.setenv("DESIGNPROOF_DETECTORS__SRP__MAX_METHODS", "12")
        monkeypatch.setenv("DESIGNPROOF_DETECTORS__DRY__ENABLED", "false")

        settings = Settings(_env_file=None)

        assert settings.min_confidence == 0.75
        assert settings.report_mode == "all_violations"
        assert settings.detectors.srp.max_methods == 12
        assert "dry" not in settings.detectors.enabled_detectors()

    @pytest.mark.parametrize("value", [-0.1, 1.5])
    def test_confidence_range(self, value):
        """Confidence thresholds must be within [0, 1]."""
        with pytest.raises(ValidationError):
            Settings(_env_file=None, min_confidence=value)

    def test_negative_tolerance(self):
        """Tolerance cannot be negative."""
        with pytest.raises(ValidationError):
            Settings(_env_file=None, changed_line_tolerance=-1)

    def test_concurrency_at_least_one(self):
        """Concurrency of zero is rejected."""
        with pytest.raises(ValidationError):
            Settings(_env_file=None, max_concurrency=0)


class TestDetectorsConfig:
    """Test per-detector configuration."""

    def test_all_enabled_by_default(self):
        """Every detector is enabled out of the box."""
        assert len(DetectorsConfig().enabled_detectors()) == 10

    def test_retry_max_attempts(self):
        """Zero attempts is rejected; None means unbounded."""
        assert RetryConfig(max_attempts=None).max_attempts is None
        with pytest.raises(ValidationError):
            RetryConfig(max_attempts=0)
