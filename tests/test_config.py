"""
Settings tests: env overrides and fail-loud validation
"""

import pytest

from tcomp.config import Settings, load_settings


class TestLoadSettings:
    """Environment and explicit overrides"""

    def test_defaults(self, monkeypatch):
        for name in ("TCOMP_DATA_DIR", "TCOMP_MAX_WORKERS", "TCOMP_ON_ERROR", "TCOMP_LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)

        settings = load_settings()

        assert settings == Settings()
        assert settings.on_error == "raise"
        assert settings.max_workers == 1

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("TCOMP_DATA_DIR", "/tmp/tourism")
        monkeypatch.setenv("TCOMP_MAX_WORKERS", "4")
        monkeypatch.setenv("TCOMP_ON_ERROR", "SKIP")
        monkeypatch.setenv("TCOMP_LOG_LEVEL", "debug")

        settings = load_settings()

        assert settings.data_dir == "/tmp/tourism"
        assert settings.max_workers == 4
        assert settings.on_error == "skip"
        assert settings.log_level == "DEBUG"

    def test_arguments_win(self, monkeypatch):
        monkeypatch.setenv("TCOMP_MAX_WORKERS", "4")

        assert load_settings(max_workers=2).max_workers == 2


@pytest.mark.fail_loud
class TestInvalidSettings:
    """Bad values raise instead of falling back"""

    def test_non_integer_workers(self, monkeypatch):
        monkeypatch.setenv("TCOMP_MAX_WORKERS", "many")

        with pytest.raises(ValueError, match="TCOMP_MAX_WORKERS"):
            load_settings()

    def test_zero_workers(self):
        with pytest.raises(ValueError, match="max_workers"):
            Settings(max_workers=0)

    def test_unknown_policy(self):
        with pytest.raises(ValueError, match="on_error"):
            Settings(on_error="retry")

    def test_unknown_log_level(self):
        with pytest.raises(ValueError, match="log level"):
            Settings(log_level="LOUD")
