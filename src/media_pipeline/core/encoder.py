"""ffmpeg wrapper producing HTTP Live Streaming output."""

import os
import subprocess
from typing import List

from .exceptions import EncoderError, EncoderTimeoutError
from .keys import MANIFEST_EXTENSION, SEGMENT_EXTENSION
from .protocols import LoggerProtocol

OUTPUT_TAIL_CHARS = 2000


def segment_pattern(base_name: str) -> str:
    """ffmpeg output pattern for media segments, e.g. ``clip_%03d.ts``."""
    return f"{base_name}_%03d.{SEGMENT_EXTENSION}"


def manifest_name(base_name: str) -> str:
    """File name of the playlist written for ``base_name``."""
    return f"{base_name}.{MANIFEST_EXTENSION}"


def build_hls_command(
    encoder_path: str,
    input_path: str,
    base_name: str,
    output_dir: str,
    resolution: str = "1080x720",
    segment_duration_seconds: int = 10,
) -> List[str]:
    """
    Build the ffmpeg argument list for HLS segmenting.

    Args:
        encoder_path: ffmpeg executable
        input_path: Source video in the scratch directory
        base_name: Base name used for manifest and segment files
        output_dir: Directory receiving the output
        resolution: Output size as WIDTHxHEIGHT
        segment_duration_seconds: Target segment length

    Returns:
        Command suitable for subprocess.run
    """
    return [
        encoder_path,
        "-i", input_path,
        "-s", resolution,
        "-hls_time", str(segment_duration_seconds),
        "-hls_list_size", "0",
        "-hls_segment_filename", os.path.join(output_dir, segment_pattern(base_name)),
        "-f", "hls",
        os.path.join(output_dir, manifest_name(base_name)),
    ]


def _tail(output) -> str:
    if not output:
        return ""
    if isinstance(output, bytes):
        output = output.decode("utf-8", errors="replace")
    return output[-OUTPUT_TAIL_CHARS:]


class FfmpegEncoder:
    """Runs ffmpeg as a blocking subprocess with a deadline."""

    def __init__(
        self,
        encoder_path: str,
        logger: LoggerProtocol,
        resolution: str = "1080x720",
        segment_duration_seconds: int = 10,
        timeout_seconds: float = 600,
    ):
        self._encoder_path = encoder_path
        self._logger = logger
        self._resolution = resolution
        self._segment_duration_seconds = segment_duration_seconds
        self._timeout_seconds = timeout_seconds

    def encode(self, input_path: str, base_name: str, output_dir: str) -> None:
        """
        Segment ``input_path`` into ``output_dir``.

        Raises:
            EncoderTimeoutError: If ffmpeg runs past the deadline; the process
                is killed first
            EncoderError: If ffmpeg cannot be started or exits non-zero
        """
        cmd = build_hls_command(
            self._encoder_path,
            input_path,
            base_name,
            output_dir,
            resolution=self._resolution,
            segment_duration_seconds=self._segment_duration_seconds,
        )
        self._logger.info("Video encoding start", command=" ".join(cmd))

        try:
            # subprocess.run kills the child before re-raising TimeoutExpired
            ret = subprocess.run(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                timeout=self._timeout_seconds,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            self._logger.error(
                f"Encoder timed out after {self._timeout_seconds}s", input_path=input_path
            )
            raise EncoderTimeoutError(
                f"Encoder did not finish within {self._timeout_seconds} seconds",
                output=_tail(exc.output),
            ) from exc
        except OSError as exc:
            self._logger.error(f"Could not start encoder {self._encoder_path}: {exc}")
            raise EncoderError(f"Could not start encoder {self._encoder_path}: {exc}") from exc

        if ret.returncode != 0:
            output = _tail(ret.stdout)
            self._logger.error(
                f"Encoder exited with status {ret.returncode}", output=output
            )
            raise EncoderError(
                f"Encoder exited with status {ret.returncode}",
                returncode=ret.returncode,
                output=output,
            )

        self._logger.info("Video encoding completed")
