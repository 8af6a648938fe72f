"""Application settings read from the environment."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field


class ConfigError(ValueError):
    """The environment does not describe a usable configuration."""


@dataclass(frozen=True)
class Config:
    """Server settings."""

    port: str
    jwt_secret: str = field(repr=False)
    admin_username: str
    admin_password: str = field(repr=False)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Config:
        """Build a configuration from ``environ`` (``os.environ`` by default)."""
        env = os.environ if environ is None else environ

        def get(key: str, default: str) -> str:
            return env.get(key, "") or default

        secret = get("JWT_SECRET", "")
        if secret in ("", "your-secret-key-change-in-production"):
            raise ConfigError(
                "Please set secure JWT_SECRET environment variable! "
                "Minimum 32 characters required"
            )
        if len(secret.encode("utf-8")) < 32:
            raise ConfigError("JWT_SECRET must be at least 32 characters for security")
        return cls(
            port=get("PORT", "8080"),
            jwt_secret=secret,
            admin_username=get("ADMIN_USERNAME", "admin"),
            admin_password=get("ADMIN_PASSWORD", "password"),
        )


def load_config(environ: Mapping[str, str] | None = None) -> Config:
    """Read the configuration from ``environ`` or the process environment."""
    return Config.from_env(environ)