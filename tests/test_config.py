import pytest

from antimg.config import Config, ConfigError, load_config

SECRET = "secret" * 6


def test_defaults_applied():
    cfg = Config.from_env({"JWT_SECRET": SECRET})
    assert cfg.port == "8080"
    assert cfg.admin_username == "admin"
    assert cfg.admin_password == "password"
    assert cfg.jwt_secret == SECRET


def test_overrides_taken_from_environment():
    cfg = Config.from_env(
        {"JWT_SECRET": SECRET, "PORT": "9090", "ADMIN_USERNAME": "root"}
    )
    assert cfg.port == "9090"
    assert cfg.admin_username == "root"


def test_empty_value_falls_back_to_default():
    cfg = Config.from_env({"JWT_SECRET": SECRET, "PORT": ""})
    assert cfg.port == "8080"


def test_missing_secret_rejected():
    with pytest.raises(ConfigError):
        Config.from_env({})


def test_short_secret_rejected():
    with pytest.raises(ConfigError, match="at least 32"):
        Config.from_env({"JWT_SECRET": "secret"})


def test_load_config_reads_process_environment(monkeypatch):
    monkeypatch.setenv("JWT_SECRET", SECRET)
    monkeypatch.setenv("PORT", "7000")
    cfg = load_config()
    assert cfg.port == "7000"
    assert cfg.jwt_secret == SECRET


def test_load_config_with_mapping_matches_from_env():
    env = {"JWT_SECRET": SECRET, "ADMIN_USERNAME": "operator"}
    assert load_config(env) == Config.from_env(env)