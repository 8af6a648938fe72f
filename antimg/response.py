"""JSON envelopes and processed-image download payloads."""

from __future__ import annotations

import io
from dataclasses import dataclass
from typing import Any

from PIL import Image

_LOSSLESS_MODES = {"1", "L", "P", "RGB", "RGBA"}


def success_payload(data: Any = None) -> dict[str, Any]:
    """Body of a successful JSON response; ``data`` is omitted when None."""
    payload: dict[str, Any] = {"code": 200, "message": "success"}
    if data is not None:
        payload["data"] = data
    return payload


def error_payload(code: int, message: str) -> dict[str, Any]:
    """Body of an error JSON response."""
    return {"code": code, "message": message}


@dataclass(frozen=True)
class ImageResponse:
    """An encoded image sent as a file download."""

    body: bytes
    filename: str

    @property
    def headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/octet-stream",
            "Content-Disposition": f'attachment; filename="{self.filename}"',
            "Cache-Control": "no-cache",
        }


def encode_image_response(image: Image.Image, format: str) -> ImageResponse:
    """Encode ``image`` for download; PNG and BMP keep their format, the rest become JPEG."""
    filename = "processed_image.jpeg" if format == "jpg" else f"processed_image.{format}"
    buffer = io.BytesIO()
    if format in ("png", "bmp"):
        if image.mode not in _LOSSLESS_MODES:
            image = image.convert("RGBA")
        image.save(buffer, format.upper())
    else:
        if image.mode not in ("RGB", "L"):
            black = Image.new("RGBA", image.size, (0, 0, 0, 255))
            image = Image.alpha_composite(black, image.convert("RGBA")).convert("RGB")
        image.save(buffer, "JPEG", quality=90)
    return ImageResponse(body=buffer.getvalue(), filename=filename)