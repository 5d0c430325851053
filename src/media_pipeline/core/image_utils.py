"""Image processing utilities for the media pipeline."""

import io
from typing import Tuple

from PIL import Image, ImageOps, UnidentifiedImageError

from .exceptions import DecodeError
from .models import MediaType


def decode_image(image_bytes: bytes, media_type: MediaType) -> Image.Image:
    """
    Decode image bytes and check they hold the claimed type.

    Args:
        image_bytes: Raw object body
        media_type: Type inferred from the object key

    Returns:
        Fully loaded PIL Image

    Raises:
        DecodeError: If the bytes are not a valid image of ``media_type``
    """
    try:
        image = Image.open(io.BytesIO(image_bytes))
        image.load()
    except (OSError, SyntaxError, Image.DecompressionBombError, UnidentifiedImageError) as exc:
        # Truncated and malformed files surface as OSError or SyntaxError
        raise DecodeError(f"Cannot decode {media_type.value} image: {exc}") from exc

    if image.format not in media_type.decode_formats:
        raise DecodeError(
            f"Expected {media_type.image_format} data, found {image.format or 'unknown'}"
        )
    return image


def resize_to_fit(img: Image.Image, size: Tuple[int, int]) -> Image.Image:
    """
    Scale an image to fit inside ``size`` preserving its aspect ratio.

    Images smaller than the box are scaled up; nothing is cropped or padded.

    Args:
        img: PIL Image to resize
        size: (width, height) bounding box

    Returns:
        Resized PIL Image
    """
    return ImageOps.contain(img, size, method=Image.Resampling.LANCZOS)


def encode_image(img: Image.Image, media_type: MediaType) -> bytes:
    """
    Encode an image in the container format of ``media_type``.

    Args:
        img: PIL Image to encode
        media_type: Target type, the same as the source type

    Returns:
        Encoded image bytes
    """
    image_format = media_type.image_format
    if image_format == "JPEG" and img.mode not in ("RGB", "L", "CMYK"):
        img = img.convert("RGB")

    output_stream = io.BytesIO()
    if image_format == "JPEG":
        img.save(output_stream, format=image_format, quality=95)
    else:
        img.save(output_stream, format=image_format)
    return output_stream.getvalue()
