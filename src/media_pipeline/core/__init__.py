"""Core utilities and shared components for the media pipeline."""

from .exceptions import (
    MediaPipelineError,
    ConfigurationError,
    EventParseError,
    UnrecognizedTypeError,
    ObjectStoreError,
    PublishError,
    DecodeError,
    EncoderError,
    EncoderTimeoutError,
    ScratchIOError,
)
from .keys import (
    base_name,
    file_extension,
    image_dest_key,
    is_segment_artifact,
    resolve_image_key,
    resolve_video_key,
    segment_dest_key,
    segment_sort_key,
)
from .logging_config import get_logger, setup_logger
from .models import (
    DerivedArtifact,
    MediaType,
    PipelineConfig,
    PipelineResult,
    ResolvedKey,
    ScratchFile,
    SourceReference,
)

__all__ = [
    "MediaPipelineError",
    "ConfigurationError",
    "EventParseError",
    "UnrecognizedTypeError",
    "ObjectStoreError",
    "PublishError",
    "DecodeError",
    "EncoderError",
    "EncoderTimeoutError",
    "ScratchIOError",
    "base_name",
    "file_extension",
    "image_dest_key",
    "is_segment_artifact",
    "resolve_image_key",
    "resolve_video_key",
    "segment_dest_key",
    "segment_sort_key",
    "get_logger",
    "setup_logger",
    "DerivedArtifact",
    "MediaType",
    "PipelineConfig",
    "PipelineResult",
    "ResolvedKey",
    "ScratchFile",
    "SourceReference",
]
