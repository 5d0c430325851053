"""Object key parsing and destination key construction."""

import re
from typing import Iterable, Optional, Tuple

from .models import MediaType, ResolvedKey

RESIZED_KEY_PREFIX = "resized-"
MANIFEST_EXTENSION = "m3u8"
SEGMENT_EXTENSION = "ts"
SEGMENT_ARTIFACT_EXTENSIONS = (MANIFEST_EXTENSION, SEGMENT_EXTENSION)

_IMAGE_KEY_PATTERN = re.compile(r".*\.([^.]*)", re.DOTALL)
_SEGMENT_INDEX_PATTERN = re.compile(r"_(\d+)$")


def base_name(name: str) -> str:
    """Return everything before the first dot of ``name``."""
    return name.split(".", 1)[0]


def file_extension(name: str) -> str:
    """Return everything after the last dot of ``name`` (all of it if there is none)."""
    return name.rsplit(".", 1)[-1]


def file_name(key: str) -> str:
    """Return the final path component of an object key."""
    return key.rsplit("/", 1)[-1]


def resolve_image_key(key: str) -> Optional[ResolvedKey]:
    """
    Infer the image type of an object key.

    The extension is matched case-sensitively, so ``photo.JPG`` is not
    recognized.

    Args:
        key: URL-decoded object key

    Returns:
        The resolved key, or None if the key is not a supported image
    """
    match = _IMAGE_KEY_PATTERN.fullmatch(key)
    if not match:
        return None

    extension = match.group(1)
    try:
        media_type = MediaType(extension)
    except ValueError:
        return None

    return ResolvedKey(
        base_name=key[: -(len(extension) + 1)],
        extension=extension,
        media_type=media_type,
    )


def resolve_video_key(
    key: str, allowed_extensions: Iterable[str] = ()
) -> Optional[ResolvedKey]:
    """
    Derive the base name and extension of an uploaded video.

    The base name is the first dot-segment of the file name, so
    ``uploads/my.video.mp4`` resolves to base ``my`` and extension ``mp4``.

    Args:
        key: URL-decoded object key
        allowed_extensions: Accepted extensions, compared case-insensitively.
            Empty accepts any extension.

    Returns:
        The resolved key, or None if the file has no extension or the
        extension is not allowed
    """
    name = file_name(key)
    if "." not in name:
        return None

    video_base = base_name(name)
    extension = file_extension(name)
    if not video_base or not extension:
        return None

    allowed = {ext.lower() for ext in allowed_extensions}
    if allowed and extension.lower() not in allowed:
        return None

    return ResolvedKey(base_name=video_base, extension=extension)


def image_dest_key(source_key: str) -> str:
    """Destination key for a resized image."""
    return RESIZED_KEY_PREFIX + source_key


def segment_dest_key(folder: str, name: str) -> str:
    """Destination key for an encoder output file."""
    folder = folder.strip("/")
    if folder:
        return f"{folder}/{name}"
    return name


def is_segment_artifact(name: str, video_base: str) -> bool:
    """
    Check whether a scratch file belongs to the video being transcoded.

    Args:
        name: File name in the scratch directory
        video_base: Base name of the source video

    Returns:
        True for ``.m3u8`` and ``.ts`` files whose base name starts with
        ``video_base``
    """
    return (
        file_extension(name) in SEGMENT_ARTIFACT_EXTENSIONS
        and base_name(name).startswith(video_base)
    )


def segment_sort_key(name: str) -> Tuple[int, int, str]:
    """
    Sort key for publishing encoder output.

    Media segments come first, ordered by their numeric suffix, and the
    manifest comes last.
    """
    if file_extension(name) == MANIFEST_EXTENSION:
        return (1, 0, name)

    match = _SEGMENT_INDEX_PATTERN.search(base_name(name))
    index = int(match.group(1)) if match else -1
    return (0, index, name)
