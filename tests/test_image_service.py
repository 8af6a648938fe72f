import io
import random
import time

import pytest
from PIL import Image

from antimg.image_service import ImageService, ProcessingError, ProcessingTimeout


def gradient(width=16, height=16):
    data = bytes(
        value
        for y in range(height)
        for x in range(width)
        for value in ((x * 12) % 256, (y * 12) % 256, 128)
    )
    return Image.frombytes("RGB", (width, height), data)


def encoded(image, fmt):
    buffer = io.BytesIO()
    image.save(buffer, fmt)
    return buffer.getvalue()


class SlowRandom(random.Random):
    def random(self):
        time.sleep(0.5)
        return super().random()


@pytest.mark.parametrize(
    ("fmt", "expected"), [("PNG", "png"), ("JPEG", "jpeg"), ("BMP", "bmp")]
)
def test_process_image_reports_format(fmt, expected):
    service = ImageService(rng=random.Random(1))
    image, format_name = service.process_image(encoded(gradient(), fmt), 0.3)
    assert format_name == expected
    assert image.width > 0 and image.height > 0


def test_level_zero_keeps_size_and_content():
    source = gradient()
    service = ImageService(rng=random.Random(3))
    image, format_name = service.process_image(encoded(source, "PNG"), 0.0)
    assert format_name == "png"
    assert image.size == source.size
    result = image.convert("RGB").tobytes()
    diffs = [abs(a - b) for a, b in zip(source.tobytes(), result)]
    assert sum(diffs) / len(diffs) < 5


def test_accepts_file_objects():
    service = ImageService(rng=random.Random(5))
    image, format_name = service.process_image(io.BytesIO(encoded(gradient(), "PNG")), 0.1)
    assert format_name == "png"
    assert image.width > 0


def test_same_seed_gives_same_result():
    data = encoded(gradient(), "PNG")
    first, _ = ImageService(rng=random.Random(42)).process_image(data, 0.9)
    second, _ = ImageService(rng=random.Random(42)).process_image(data, 0.9)
    assert first.size == second.size
    assert first.tobytes() == second.tobytes()


def test_strong_attack_changes_image():
    source = gradient()
    service = ImageService(rng=random.Random(7))
    result = service.attack_watermark(source, 1.0)
    assert result.convert("RGB").resize(source.size).tobytes() != source.tobytes()
    assert result.mode in ("RGB", "RGBA")


def test_garbage_input_raises():
    service = ImageService(rng=random.Random(0))
    with pytest.raises(ProcessingError):
        service.process_image(b"not an image at all", 0.5)


def test_unsupported_format_raises():
    service = ImageService(rng=random.Random(0))
    with pytest.raises(ProcessingError):
        service.process_image(encoded(gradient().convert("P"), "GIF"), 0.5)


def test_timeout_raises_with_message():
    service = ImageService(rng=SlowRandom(0), timeout=0.05)
    with pytest.raises(ProcessingTimeout) as info:
        service.process_image(encoded(gradient(4, 4), "PNG"), 0.5)
    assert str(info.value) == "图片处理超时，请尝试较小的图片或降低攻击强度"
    assert isinstance(info.value, ProcessingError)