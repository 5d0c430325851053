"""Tests for image_utils.py."""

import io

import pytest
from PIL import Image

from media_pipeline.core.exceptions import DecodeError
from media_pipeline.core.image_utils import decode_image, encode_image, resize_to_fit
from media_pipeline.core.models import MediaType
from media_pipeline.testing.fakes import create_test_image


def _multi_picture_jpeg(width, height):
    buffer = io.BytesIO()
    first = Image.new("RGB", (width, height), color="red")
    second = Image.new("RGB", (width, height), color="blue")
    first.save(buffer, format="MPO", save_all=True, append_images=[second])
    return buffer.getvalue()


class TestDecodeImage:
    def test_decodes_jpeg(self):
        image = decode_image(create_test_image(40, 30), MediaType.JPG)
        assert image.size == (40, 30)
        assert image.format == "JPEG"

    def test_decodes_png(self):
        data = create_test_image(40, 30, image_format="PNG", mode="RGBA")
        image = decode_image(data, MediaType.PNG)
        assert image.mode == "RGBA"

    def test_garbage_raises_decode_error(self):
        with pytest.raises(DecodeError):
            decode_image(b"not an image", MediaType.JPEG)

    def test_truncated_data_raises_decode_error(self):
        data = create_test_image(200, 200)
        with pytest.raises(DecodeError):
            decode_image(data[: len(data) // 2], MediaType.JPG)

    def test_format_must_match_claimed_type(self):
        png_bytes = create_test_image(20, 20, image_format="PNG")
        with pytest.raises(DecodeError, match="Expected JPEG"):
            decode_image(png_bytes, MediaType.JPG)

    def test_accepts_multi_picture_jpeg(self):
        data = _multi_picture_jpeg(400, 300)
        assert data[:2] == b"\xff\xd8"

        image = decode_image(data, MediaType.JPG)
        assert image.format == "MPO"
        assert image.size == (400, 300)

    def test_multi_picture_jpeg_is_resized_and_written_as_jpeg(self):
        image = decode_image(_multi_picture_jpeg(400, 300), MediaType.JPEG)
        data = encode_image(resize_to_fit(image, (223, 223)), MediaType.JPEG)

        output = Image.open(io.BytesIO(data))
        assert output.format == "JPEG"
        assert output.size == (223, 167)


class TestResizeToFit:
    """Tests for resize_to_fit."""

    def test_large_landscape_image_fits_box(self):
        image = Image.new("RGB", (4000, 3000))
        resized = resize_to_fit(image, (223, 223))
        assert max(resized.size) <= 223
        assert resized.size == (223, 167)
        assert resized.width / resized.height == pytest.approx(4000 / 3000, rel=0.01)

    def test_portrait_image_fits_box(self):
        image = Image.new("RGB", (300, 600))
        resized = resize_to_fit(image, (223, 223))
        assert resized.height == 223
        assert resized.width == pytest.approx(111.5, abs=1)

    def test_small_image_is_scaled_up_to_box(self):
        image = Image.new("RGB", (50, 25))
        resized = resize_to_fit(image, (223, 223))
        assert resized.width == 223
        assert resized.height == pytest.approx(111.5, abs=1)

    def test_square_image(self):
        resized = resize_to_fit(Image.new("RGB", (1000, 1000)), (223, 223))
        assert resized.size == (223, 223)


class TestEncodeImage:
    @pytest.mark.parametrize(
        "media_type,expected_format",
        [(MediaType.JPG, "JPEG"), (MediaType.JPEG, "JPEG"), (MediaType.PNG, "PNG")],
    )
    def test_keeps_container_format(self, media_type, expected_format):
        data = encode_image(Image.new("RGB", (10, 10)), media_type)
        assert Image.open(io.BytesIO(data)).format == expected_format

    def test_alpha_is_dropped_for_jpeg(self):
        data = encode_image(Image.new("RGBA", (10, 10)), MediaType.JPG)
        assert Image.open(io.BytesIO(data)).mode == "RGB"

    def test_alpha_is_kept_for_png(self):
        data = encode_image(Image.new("RGBA", (10, 10)), MediaType.PNG)
        assert Image.open(io.BytesIO(data)).mode == "RGBA"
