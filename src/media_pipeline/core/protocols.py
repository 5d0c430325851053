"""Protocol definitions for dependency injection and testability."""

from typing import Any, Dict, List, Protocol

from .models import ScratchFile


class ObjectStoreProtocol(Protocol):
    """Protocol for the object store operations the handlers use (boto3 S3 client)."""

    def get_object(self, Bucket: str, Key: str) -> Dict[str, Any]:
        """Get object from S3."""
        ...

    def put_object(self, **kwargs: Any) -> Dict[str, Any]:
        """Put object to S3 (Bucket, Key, Body, ContentLength and optional ContentType)."""
        ...


class EncoderProtocol(Protocol):
    """Protocol for the external HLS encoder."""

    def encode(self, input_path: str, base_name: str, output_dir: str) -> None:
        """Write ``{base_name}.m3u8`` and ``{base_name}_NNN.ts`` files to ``output_dir``."""
        ...


class ScratchSpaceProtocol(Protocol):
    """Protocol for a per-invocation scratch directory."""

    path: str

    def write_stream(self, stream: Any, name: str) -> str:
        """Copy ``stream`` into the scratch directory and return the file path."""
        ...

    def list_files(self) -> List[ScratchFile]:
        """List regular files in the scratch directory."""
        ...


class LoggerProtocol(Protocol):
    """Protocol for logging operations."""

    def debug(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log debug message."""
        ...

    def info(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log info message."""
        ...

    def warning(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log warning message."""
        ...

    def error(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log error message."""
        ...
