"""Checks on uploaded images and request parameters."""

from __future__ import annotations

DEFAULT_ATTACK_LEVEL = 0.5
MAX_UPLOAD_SIZE = 100 << 20

_ALLOWED_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".bmp", ".webp"})
_ALLOWED_MIME_TYPES = frozenset(
    {"image/jpeg", "image/jpg", "image/png", "image/bmp", "image/webp"}
)


class ValidationError(ValueError):
    """Raised when request input is rejected."""


def _parse_float(value: str) -> float:
    if value != value.strip() or "_" in value:
        raise ValueError(value)
    return float(value)


def parse_attack_level(value: str | None) -> float:
    """Parse an attack level in [0, 1]; an empty value gives the default."""
    if not value:
        return DEFAULT_ATTACK_LEVEL
    try:
        level = _parse_float(value)
    except ValueError:
        raise ValidationError("攻击强度必须是数字") from None
    if level < 0 or level > 1:
        raise ValidationError("攻击强度必须在0.0-1.0之间")
    return level


def parse_attack_level_lenient(value: str | None) -> float:
    """Parse an attack level, falling back to the default on any bad input."""
    try:
        return parse_attack_level(value)
    except ValidationError:
        return DEFAULT_ATTACK_LEVEL


def _extension(filename: str) -> str:
    name = filename.rpartition("/")[2]
    dot = name.rfind(".")
    return name[dot:] if dot >= 0 else ""


def validate_image_upload(
    filename: str, size: int, content_type: str | None = None
) -> None:
    """Reject uploads that are too large or not a supported image type."""
    if size > MAX_UPLOAD_SIZE:
        raise ValidationError("文件大小超过限制，最大支持100MB")
    if _extension(filename).lower() not in _ALLOWED_EXTENSIONS:
        raise ValidationError("不支持的图片格式，仅支持: jpg, jpeg, png, bmp, webp")
    if content_type and content_type not in _ALLOWED_MIME_TYPES:
        raise ValidationError("无效的图片MIME类型")