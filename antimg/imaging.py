"""Pixel operations used by the watermark attack; results are RGBA except for JPEG round trips."""

from __future__ import annotations

import io
import math

from PIL import Image, ImageChops, ImageFilter


def _rgba(image: Image.Image) -> Image.Image:
    return image.copy() if image.mode == "RGBA" else image.convert("RGBA")


def _is_empty(image: Image.Image) -> bool:
    return image.width == 0 or image.height == 0


def _clamp(value: float) -> int:
    return min(max(int(value + 0.5), 0), 255)


def _apply_lut(image: Image.Image, lut: list[int]) -> Image.Image:
    rgba = _rgba(image)
    return rgba if _is_empty(rgba) else rgba.point(lut * 3 + list(range(256)))


def adjust_brightness(image: Image.Image, percentage: float) -> Image.Image:
    """Shift colour channels by ``percentage`` (clamped to -100..100) of full scale."""
    shift = 255.0 * min(max(percentage, -100.0), 100.0) / 100.0
    return _apply_lut(image, [_clamp(i + shift) for i in range(256)])


def _contrast_value(i: int, factor: float) -> int:
    level = i / 255.0 - 0.5
    if 0 <= factor <= 1:
        return _clamp((0.5 + level * factor) * 255.0)
    if factor < 2:
        return _clamp((0.5 + level / (2.0 - factor)) * 255.0)
    return int(i / 255.0 + 0.5) * 255


def adjust_contrast(image: Image.Image, percentage: float) -> Image.Image:
    """Change contrast by ``percentage`` (clamped to -100..100) around mid-grey."""
    factor = (100.0 + min(max(percentage, -100.0), 100.0)) / 100.0
    return _apply_lut(image, [_contrast_value(i, factor) for i in range(256)])


def blur(image: Image.Image, sigma: float) -> Image.Image:
    """Gaussian blur; non-positive ``sigma`` copies."""
    rgba = _rgba(image)
    if sigma <= 0 or _is_empty(rgba):
        return rgba
    return rgba.filter(ImageFilter.GaussianBlur(sigma))


def sharpen(image: Image.Image, sigma: float) -> Image.Image:
    """Unsharp mask: ``2 * src - blur(src, sigma)`` per channel, clamped."""
    rgba = _rgba(image)
    if sigma <= 0 or _is_empty(rgba):
        return rgba
    blurred = blur(rgba, sigma)
    gain = ImageChops.subtract(rgba, blurred)
    loss = ImageChops.subtract(blurred, rgba)
    return ImageChops.subtract(ImageChops.add(rgba, gain), loss)


def rotate(image: Image.Image, angle: float) -> Image.Image:
    """Rotate counter-clockwise by ``angle`` degrees, growing the canvas; new areas are transparent."""
    rgba = _rgba(image)
    if _is_empty(rgba) or angle % 360 == 0:
        return rgba
    return rgba.rotate(
        angle, resample=Image.Resampling.BILINEAR, expand=True, fillcolor=(0, 0, 0, 0)
    )


def resize(image: Image.Image, width: int, height: int) -> Image.Image:
    """Lanczos resize; a zero dimension keeps the aspect ratio, invalid sizes give an empty image."""
    rgba = _rgba(image)
    src_w, src_h = rgba.size
    if width < 0 or height < 0 or width == height == 0 or _is_empty(rgba):
        return Image.new("RGBA", (0, 0))
    if width == 0:
        width = max(1, math.floor(height * src_w / src_h + 0.5))
    if height == 0:
        height = max(1, math.floor(width * src_h / src_w + 0.5))
    if (width, height) == (src_w, src_h):
        return rgba
    return rgba.resize((width, height), Image.Resampling.LANCZOS)


def crop_center(image: Image.Image, width: int, height: int) -> Image.Image:
    """Cut a ``width`` x ``height`` area around the centre, clipped to the image."""
    rgba = _rgba(image)
    src_w, src_h = rgba.size
    left = int((src_w - width) / 2)
    top = int((src_h - height) / 2)
    box = (max(0, left), max(0, top), min(src_w, left + width), min(src_h, top + height))
    if box[2] <= box[0] or box[3] <= box[1]:
        return Image.new("RGBA", (0, 0))
    return rgba.crop(box)


def jpeg_roundtrip(image: Image.Image, quality: int) -> Image.Image:
    """Encode as JPEG at ``quality`` and decode again; transparency goes onto black.

    Raises ValueError for an empty image.
    """
    if _is_empty(image):
        raise ValueError("cannot encode an empty image as JPEG")
    if image.mode not in ("RGB", "L"):
        black = Image.new("RGBA", image.size, (0, 0, 0, 255))
        image = Image.alpha_composite(black, image.convert("RGBA")).convert("RGB")
    buffer = io.BytesIO()
    image.save(buffer, "JPEG", quality=min(max(quality, 1), 100))
    buffer.seek(0)
    with Image.open(buffer) as decoded:
        decoded.load()
        return decoded.copy()