"""Tests for environment configuration and the CLI."""
import pytest

from telechat.app_server import build_parser, load_config
from telechat.prepare.runtime_config import DEFAULT_CAPACITY, DEFAULT_SESSION, get_runtime_config

_VARS = ("TELECHAT_SESSION", "LOG_LEVEL", "TELEGRAM_API_ID", "TELEGRAM_API_HASH",
         "CHANNEL_CAPACITY", "UI_FPS", "WINDOW_WIDTH", "WINDOW_HEIGHT")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _VARS:
        monkeypatch.delenv(name, raising=False)


class TestRuntimeConfig:

    def test_defaults(self):
        cfg = get_runtime_config()
        assert cfg.session_path == DEFAULT_SESSION
        assert cfg.log_level == "INFO"
        assert cfg.channel_capacity == DEFAULT_CAPACITY
        assert cfg.has_credentials is False

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("TELECHAT_SESSION", "work.session")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("TELEGRAM_API_ID", "12345")
        monkeypatch.setenv("TELEGRAM_API_HASH", "abcde")
        monkeypatch.setenv("WINDOW_WIDTH", "1280")

        cfg = get_runtime_config()

        assert cfg.session_path == "work.session"
        assert cfg.log_level == "DEBUG"
        assert cfg.api_id == 12345
        assert cfg.has_credentials is True
        assert cfg.window_size == (1280, 640)

    @pytest.mark.parametrize("raw", ["abc", "0", "-3"])
    def test_invalid_numbers_fall_back(self, monkeypatch, raw):
        monkeypatch.setenv("CHANNEL_CAPACITY", raw)
        assert get_runtime_config().channel_capacity == DEFAULT_CAPACITY

    def test_tiny_window_falls_back(self, monkeypatch):
        monkeypatch.setenv("WINDOW_HEIGHT", "10")
        assert get_runtime_config().window_size == (960, 640)


class TestCli:

    def test_flags_override_environment(self, monkeypatch):
        monkeypatch.setenv("TELECHAT_SESSION", "env.session")
        monkeypatch.setenv("TELEGRAM_API_ID", "1")

        cfg = load_config(["--session", "cli.session", "--api-id", "99", "--api-hash", "zz",
                           "--log-level", "warning"])

        assert cfg.session_path == "cli.session"
        assert cfg.api_id == 99
        assert cfg.api_hash == "zz"
        assert cfg.log_level == "WARNING"

    def test_api_id_must_be_integer(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--api-id", "abc"])
