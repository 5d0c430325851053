"""Custom exceptions for the media pipeline."""

from typing import Optional


class MediaPipelineError(Exception):
    """Base exception for all media pipeline errors."""


class ConfigurationError(MediaPipelineError):
    """Error raised for invalid configuration options."""


class EventParseError(MediaPipelineError):
    """Error raised when an upload notification cannot be interpreted."""


class UnrecognizedTypeError(MediaPipelineError):
    """Source key extension is not one the pipeline handles.

    Pipelines catch this and report a skipped result instead of failing.
    """


class ObjectStoreError(MediaPipelineError):
    """Error raised when reading from the object store fails."""


class PublishError(ObjectStoreError):
    """Error raised when writing a derived artifact fails."""

    def __init__(self, message: str, bucket: str = "", key: str = ""):
        super().__init__(message)
        self.bucket = bucket
        self.key = key


class DecodeError(MediaPipelineError):
    """Source bytes are not a valid image of the claimed type."""


class EncoderError(MediaPipelineError):
    """The external encoder failed to produce its output."""

    def __init__(self, message: str, returncode: Optional[int] = None, output: str = ""):
        super().__init__(message)
        self.returncode = returncode
        self.output = output


class EncoderTimeoutError(EncoderError, TimeoutError):
    """The external encoder did not finish before its deadline."""


class ScratchIOError(MediaPipelineError):
    """Error raised when staging files in the scratch directory fails."""
