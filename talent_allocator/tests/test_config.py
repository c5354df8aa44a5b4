"""Tests for environment-driven settings."""

import pytest

from talent_allocator.config import load_env, load_settings, local_settings

ENV_VARS = (
    "TALENT_BAAS_URL",
    "TALENT_BAAS_KEY",
    "TALENT_HTTP_TIMEOUT",
    "TALENT_HTTP_RETRIES",
    "TALENT_CONFLICT_POLICY",
    "TALENT_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    # setenv first so teardown also undoes values written by load_dotenv
    for name in ENV_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


class TestLoadSettings:
    def test_defaults_are_local_mode(self):
        settings = load_settings()
        assert settings.local_mode
        assert settings.conflict_policy == "warn"
        assert settings.http_timeout_s == 30.0
        assert settings.http_retries == 3
        assert settings.log_level == "INFO"

    def test_remote(self, monkeypatch):
        monkeypatch.setenv("TALENT_BAAS_URL", "https://store.example.com/")
        monkeypatch.setenv("TALENT_BAAS_KEY", "secret")
        monkeypatch.setenv("TALENT_HTTP_TIMEOUT", "2.5")
        monkeypatch.setenv("TALENT_HTTP_RETRIES", "0")
        settings = load_settings()
        assert not settings.local_mode
        assert settings.baas_url == "https://store.example.com"
        assert settings.http_timeout_s == 2.5
        assert settings.http_retries == 1

    def test_url_without_key_stays_local(self, monkeypatch):
        monkeypatch.setenv("TALENT_BAAS_URL", "https://store.example.com")
        assert load_settings().local_mode

    def test_reject_policy(self, monkeypatch):
        monkeypatch.setenv("TALENT_CONFLICT_POLICY", "REJECT")
        assert load_settings().conflict_policy == "reject"

    def test_invalid_values(self, monkeypatch):
        monkeypatch.setenv("TALENT_CONFLICT_POLICY", "ignore")
        with pytest.raises(ValueError):
            load_settings()
        monkeypatch.setenv("TALENT_CONFLICT_POLICY", "warn")
        monkeypatch.setenv("TALENT_HTTP_TIMEOUT", "soon")
        with pytest.raises(ValueError):
            load_settings()

    def test_local_settings(self):
        assert local_settings("reject").conflict_policy == "reject"
        with pytest.raises(ValueError):
            local_settings("maybe")


class TestLoadEnv:
    def test_reads_dotenv_file(self, tmp_path, monkeypatch):
        env_file = tmp_path / ".env"
        env_file.write_text("TALENT_CONFLICT_POLICY=reject\n")
        load_env(env_file)
        assert load_settings().conflict_policy == "reject"
