"""Decoding uploaded images and running the watermark attack on them."""

from __future__ import annotations

import io
import queue
import random
import threading
from typing import BinaryIO

from PIL import Image, UnidentifiedImageError

from antimg import imaging

_FORMAT_NAMES = {"JPEG": "jpeg", "MPO": "jpeg", "PNG": "png", "BMP": "bmp", "WEBP": "webp"}


class ProcessingError(Exception):
    """An image cannot be processed."""


class ProcessingTimeout(ProcessingError):
    """Processing took longer than allowed."""

    def __init__(self, message: str = "图片处理超时，请尝试较小的图片或降低攻击强度") -> None:
        super().__init__(message)


def _decode(stream: BinaryIO) -> tuple[Image.Image, str]:
    try:
        with Image.open(stream, formats=list(_FORMAT_NAMES)) as opened:
            opened.load()
            return opened.copy(), _FORMAT_NAMES[opened.format or "JPEG"]
    except UnidentifiedImageError:
        raise ProcessingError("image: unknown format") from None
    except (OSError, ValueError, SyntaxError, Image.DecompressionBombError) as exc:
        raise ProcessingError(str(exc) or type(exc).__name__) from exc


class ImageService:
    """Strips watermarks by repeatedly distorting an image."""

    def __init__(self, rng: random.Random | None = None, timeout: float = 30.0) -> None:
        self.rng = rng or random.Random()
        self.timeout = timeout

    def process_image(
        self, data: bytes | bytearray | memoryview | BinaryIO, attack_level: float
    ) -> tuple[Image.Image, str]:
        """Decode ``data``, attack it and return the result with its format name.

        Raises ProcessingError for undecodable input and ProcessingTimeout
        when the work does not finish in time.
        """
        stream = io.BytesIO(bytes(data)) if isinstance(data, (bytes, bytearray, memoryview)) else data
        outcome: queue.Queue = queue.Queue(maxsize=1)

        def work() -> None:
            try:
                image, format_name = _decode(stream)
                outcome.put((self.attack_watermark(image, attack_level), format_name, None))
            except Exception as exc:
                outcome.put((None, "", exc))

        threading.Thread(target=work, daemon=True).start()
        try:
            image, format_name, error = outcome.get(timeout=self.timeout)
        except queue.Empty:
            raise ProcessingTimeout() from None
        if error is not None:
            raise error
        return image, format_name

    def attack_watermark(self, image: Image.Image, attack_level: float) -> Image.Image:
        """Run the geometric, noise, frequency, compression and colour rounds."""
        result = self._geometric(image, attack_level)
        result = self._noise(result, attack_level)
        result = self._frequency(result, attack_level)
        result = self._compression(result, attack_level)
        result = self._colour(result, attack_level)
        if attack_level > 0.7:
            result = self._final_mix(result, attack_level)
        return result

    def _jitter(self, level: float, spread: float) -> float:
        return (self.rng.random() - 0.5) * level * spread

    def _tone(self, image: Image.Image, level: float, b_spread: float, c_spread: float) -> Image.Image:
        brightness = self._jitter(level, b_spread)
        contrast = self._jitter(level, c_spread)
        return imaging.adjust_contrast(imaging.adjust_brightness(image, brightness), contrast)

    def _noise(self, image: Image.Image, level: float) -> Image.Image:
        result = self._tone(image, level, 60, 80)
        for _ in range(int(level * 3) + 1):
            result = self._tone(result, level, 20, 30)
        return result

    def _frequency(self, image: Image.Image, level: float) -> Image.Image:
        result = image
        if level * 3.0 > 0.5:
            result = imaging.blur(result, level * 3.0)
        if level > 0.3:
            result = imaging.sharpen(result, level * 5.0)
        for round_index in range(int(level * 2) + 1):
            if round_index % 2 == 0:
                result = imaging.blur(result, level * 2.0)
            else:
                result = imaging.sharpen(result, level * 3.0)
        if level > 0.7:
            result = imaging.blur(result, level * 4.0)
        return result

    def _geometric(self, image: Image.Image, level: float) -> Image.Image:
        width, height = image.size

        def rescale(img: Image.Image, spread: float) -> Image.Image:
            scale = 1.0 + self._jitter(level, spread)
            resized = imaging.resize(img, int(width * scale), int(height * scale))
            return imaging.crop_center(resized, width, height)

        result = image
        if level > 0.2:
            result = imaging.rotate(result, self._jitter(level, 15))
        if level > 0.3:
            result = rescale(result, 0.2)
        for _ in range(int(level * 3) + 1):
            result = imaging.rotate(result, self._jitter(level, 8))
            result = rescale(result, 0.1)
        if level > 0.8:
            result = imaging.rotate(result, self._jitter(level, 20))
        return result

    def _compression(self, image: Image.Image, level: float) -> Image.Image:
        quality = max(100 - int(level * 60), 30)
        result = image
        for round_index in range(int(level * 5) + 1):
            try:
                result = imaging.jpeg_roundtrip(result, max(quality - round_index * 5, 20))
            except (OSError, ValueError):
                return image
        return result

    def _colour(self, image: Image.Image, level: float) -> Image.Image:
        result = image
        for _ in range(int(level * 4) + 1):
            result = self._tone(result, level, 50, 60)
        return result

    def _final_mix(self, image: Image.Image, level: float) -> Image.Image:
        result = image
        quality = max(50 - int(level * 30), 15)
        for _ in range(3):
            result = imaging.sharpen(imaging.blur(result, level * 5.0), level * 6.0)
            result = self._tone(result, level, 40, 50)
            result = imaging.rotate(result, self._jitter(level, 10))
            try:
                result = imaging.jpeg_roundtrip(result, quality)
            except (OSError, ValueError):
                pass
        return result