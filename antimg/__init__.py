"""Watermark-degrading image attacks with upload validation, tokens, rate limiting and configuration."""

__version__ = "0.1.0"

__all__ = [
    "config",
    "errors",
    "image_service",
    "imaging",
    "ratelimit",
    "response",
    "tokens",
    "validation",
]