"""Per-invocation scratch directories for staging encoder input and output."""

import os
import re
import shutil
from typing import Any, BinaryIO, List, Optional

from .error_handling import with_error_handling
from .keys import base_name, file_extension
from .logging_config import get_logger
from .models import ScratchFile

CHUNK_SIZE = 64 * 1024

_UNSAFE_NAMESPACE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


class ScratchWorkspace:
    """
    A scratch directory owned by a single invocation.

    The directory is ``{root}/{namespace}``. It is created on enter and
    removed with everything in it on exit, so concurrent invocations sharing
    the same root never see each other's files.

    Example:
        with ScratchWorkspace("/tmp", request_id) as scratch:
            path = scratch.write_stream(body, "clip.mp4")
    """

    def __init__(self, root: str, namespace: str, keep: bool = False):
        safe_namespace = _UNSAFE_NAMESPACE_CHARS.sub("_", namespace).strip(".")
        if not safe_namespace:
            raise ValueError(f"Invalid scratch namespace: {namespace!r}")
        self.root = root
        self.path = os.path.join(root, safe_namespace)
        self.keep = keep
        self._logger = get_logger("media-pipeline.scratch")

    @with_error_handling
    def __enter__(self) -> "ScratchWorkspace":
        os.makedirs(self.path, exist_ok=True)
        self._logger.debug(f"Allocated scratch directory {self.path}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if not self.keep:
            shutil.rmtree(self.path, ignore_errors=True)
            self._logger.debug(f"Released scratch directory {self.path}")
        return False

    @with_error_handling
    def write_stream(self, stream: BinaryIO, name: str) -> str:
        """
        Copy a readable stream into the scratch directory.

        Args:
            stream: File-like object opened for binary reading
            name: File name inside the scratch directory; an existing file
                is overwritten

        Returns:
            Absolute path of the written file
        """
        if os.path.basename(name) != name or name in ("", ".", ".."):
            raise ValueError(f"Scratch file name must not contain a path: {name!r}")

        path = os.path.join(self.path, name)
        with open(path, "wb") as output:
            shutil.copyfileobj(stream, output, CHUNK_SIZE)
        return path

    @with_error_handling
    def list_files(self) -> List[ScratchFile]:
        """List regular files directly inside the scratch directory."""
        files = []
        with os.scandir(self.path) as entries:
            for entry in entries:
                if not entry.is_file():
                    continue
                files.append(
                    ScratchFile(
                        name=entry.name,
                        path=entry.path,
                        base_name=base_name(entry.name),
                        extension=file_extension(entry.name),
                        size=entry.stat().st_size,
                    )
                )
        return files


def close_body(stream: Optional[Any]) -> None:
    """Close a response body if it supports closing."""
    close = getattr(stream, "close", None)
    if callable(close):
        close()
