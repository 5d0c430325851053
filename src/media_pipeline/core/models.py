"""Shared data models for the media pipeline."""

import os
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Literal, Optional, Tuple

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from .exceptions import ConfigurationError


class MediaType(str, Enum):
    """Image types the resizer accepts, keyed by their file extension."""

    JPG = "jpg"
    JPEG = "jpeg"
    PNG = "png"

    @property
    def image_format(self) -> str:
        """Pillow encoder name for this type."""
        return "PNG" if self is MediaType.PNG else "JPEG"

    @property
    def decode_formats(self) -> FrozenSet[str]:
        """
        Pillow formats whose data is valid for this type.

        Multi-picture JPEGs from phones and cameras open as MPO.
        """
        return frozenset({"PNG"}) if self is MediaType.PNG else frozenset({"JPEG", "MPO"})

    @property
    def content_type(self) -> str:
        """MIME type sent with the published object."""
        return "image/png" if self is MediaType.PNG else "image/jpeg"


class SourceReference(BaseModel):
    """The uploaded object that triggered an invocation."""

    model_config = {"frozen": True}

    bucket: str
    key: str


class ResolvedKey(BaseModel):
    """Identity derived from an object key."""

    base_name: str
    extension: str
    media_type: Optional[MediaType] = None


class ScratchFile(BaseModel):
    """A file found in the scratch directory after encoding."""

    name: str
    path: str
    base_name: str
    extension: str
    size: int = 0


class DerivedArtifact(BaseModel):
    """An object to be written to the destination bucket."""

    destination_bucket: str
    destination_key: str
    content_type: Optional[str] = None
    payload: Optional[bytes] = None
    source_path: Optional[str] = None
    content_length: int = 0

    @model_validator(mode="after")
    def _check_payload_source(self) -> "DerivedArtifact":
        if (self.payload is None) == (self.source_path is None):
            raise ValueError("exactly one of payload or source_path must be set")
        return self


class PipelineResult(BaseModel):
    """Outcome of handling one upload notification."""

    source_bucket: str
    source_key: str
    status: Literal["published", "skipped"] = "published"
    reason: str = ""
    published_keys: List[str] = Field(default_factory=list)
    processing_time: float = 0.0

    @property
    def skipped(self) -> bool:
        return self.status == "skipped"


DEFAULT_VIDEO_EXTENSIONS: Tuple[str, ...] = ("mp4", "mov", "m4v", "mkv", "avi", "webm")


class PipelineConfig(BaseModel):
    """Configuration shared by the image and segment handlers."""

    destination_bucket: str
    destination_folder: str = ""
    scratch_dir: str = "/tmp"
    encoder_path: str = "/opt/bin/ffmpeg"
    target_resolution: str = "1080x720"
    segment_duration_seconds: int = Field(default=10, gt=0)
    encoder_timeout_seconds: float = Field(default=600, gt=0)
    thumbnail_width: int = Field(default=223, gt=0)
    thumbnail_height: int = Field(default=223, gt=0)
    video_extensions: Tuple[str, ...] = DEFAULT_VIDEO_EXTENSIONS

    @field_validator("destination_bucket")
    @classmethod
    def _bucket_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("destination bucket must not be empty")
        return value

    @field_validator("destination_folder")
    @classmethod
    def _strip_folder(cls, value: str) -> str:
        return value.strip("/")

    @field_validator("target_resolution")
    @classmethod
    def _check_resolution(cls, value: str) -> str:
        width, sep, height = value.lower().partition("x")
        if not sep or not width.isdigit() or not height.isdigit():
            raise ValueError(f"resolution must look like WIDTHxHEIGHT, got {value!r}")
        if int(width) == 0 or int(height) == 0:
            raise ValueError(f"resolution must be non-zero, got {value!r}")
        return f"{int(width)}x{int(height)}"

    @field_validator("video_extensions", mode="before")
    @classmethod
    def _split_extensions(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.split(",")
        return tuple(ext.strip().lstrip(".").lower() for ext in value if ext.strip())

    @property
    def thumbnail_size(self) -> Tuple[int, int]:
        return (self.thumbnail_width, self.thumbnail_height)

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> "PipelineConfig":
        """
        Build configuration from environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            Validated configuration

        Raises:
            ConfigurationError: If a required value is missing or invalid
        """
        environ = os.environ if environ is None else environ
        env_map = {
            "destination_bucket": "DESTINATION_BUCKET",
            "destination_folder": "DESTINATION_FOLDER",
            "scratch_dir": "SCRATCH_DIR",
            "encoder_path": "ENCODER_PATH",
            "target_resolution": "TARGET_RESOLUTION",
            "segment_duration_seconds": "SEGMENT_DURATION_SECONDS",
            "encoder_timeout_seconds": "ENCODER_TIMEOUT_SECONDS",
            "thumbnail_width": "THUMBNAIL_WIDTH",
            "thumbnail_height": "THUMBNAIL_HEIGHT",
            "video_extensions": "VIDEO_EXTENSIONS",
        }
        values = {
            field: environ[var] for field, var in env_map.items() if var in environ
        }

        if "destination_bucket" not in values:
            raise ConfigurationError("DESTINATION_BUCKET environment variable is required")

        try:
            return cls(**values)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid pipeline configuration: {exc}") from exc
