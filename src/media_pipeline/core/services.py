"""Service implementations for the image and segment pipelines."""

import os
import time
from typing import BinaryIO, Callable, List, Optional, Tuple

from .encoder import manifest_name
from .error_handling import with_error_handling, with_publish_error_handling
from .exceptions import UnrecognizedTypeError
from .image_utils import decode_image, encode_image, resize_to_fit
from .keys import (
    image_dest_key,
    is_segment_artifact,
    resolve_image_key,
    resolve_video_key,
    segment_dest_key,
    segment_sort_key,
)
from .models import (
    DerivedArtifact,
    MediaType,
    PipelineConfig,
    PipelineResult,
    ResolvedKey,
    ScratchFile,
    SourceReference,
)
from .observability import LogContext
from .protocols import (
    EncoderProtocol,
    LoggerProtocol,
    ObjectStoreProtocol,
    ScratchSpaceProtocol,
)
from .scratch import ScratchWorkspace, close_body


class ObjectStoreService:
    """Reads sources from and writes artifacts to the object store."""

    def __init__(self, s3_client: ObjectStoreProtocol, logger: LoggerProtocol):
        self._s3_client = s3_client
        self._logger = logger

    @with_error_handling
    def open_source(self, source: SourceReference) -> BinaryIO:
        """Open the source object body as a stream."""
        response = self._s3_client.get_object(Bucket=source.bucket, Key=source.key)
        return response["Body"]

    @with_error_handling
    def fetch_bytes(self, source: SourceReference) -> bytes:
        """Download the whole source object."""
        body = self.open_source(source)
        try:
            return body.read()
        finally:
            close_body(body)

    @with_publish_error_handling
    def publish(self, artifact: DerivedArtifact) -> None:
        """Write one artifact, streaming from disk when it lives in scratch space."""
        self._logger.info(
            f"Writing to: {artifact.destination_bucket}/{artifact.destination_key}"
        )
        params = {
            "Bucket": artifact.destination_bucket,
            "Key": artifact.destination_key,
            "ContentLength": artifact.content_length,
        }
        if artifact.content_type:
            params["ContentType"] = artifact.content_type

        if artifact.payload is not None:
            self._s3_client.put_object(Body=artifact.payload, **params)
        else:
            with self._open_scratch_file(artifact.source_path) as body:
                self._s3_client.put_object(Body=body, **params)

    @with_error_handling
    def _open_scratch_file(self, path: str) -> BinaryIO:
        return open(path, "rb")

    def publish_all(self, artifacts: List[DerivedArtifact]) -> List[str]:
        """
        Publish artifacts in order, stopping at the first failure.

        Returns:
            Destination keys written

        Raises:
            PublishError: From the first artifact that fails; later artifacts
                are not attempted
        """
        published = []
        for artifact in artifacts:
            self.publish(artifact)
            published.append(artifact.destination_key)
        return published


class ImageResizeService:
    """Resizes image bytes without touching any I/O."""

    def __init__(self, size: Tuple[int, int] = (223, 223)):
        self._size = size

    def resize(self, source_bytes: bytes, media_type: MediaType) -> bytes:
        """
        Scale an image to fit the thumbnail box and re-encode it in its own format.

        Raises:
            DecodeError: If the bytes are not a valid ``media_type`` image
        """
        image = decode_image(source_bytes, media_type)
        resized = resize_to_fit(image, self._size)
        return encode_image(resized, media_type)


class ImageResizePipeline:
    """Fetch, resize and publish one uploaded image."""

    def __init__(
        self,
        object_store: ObjectStoreService,
        resizer: ImageResizeService,
        config: PipelineConfig,
        logger: LoggerProtocol,
    ):
        self._object_store = object_store
        self._resizer = resizer
        self._config = config
        self._logger = logger

    def resolve(self, source: SourceReference) -> ResolvedKey:
        """Raise UnrecognizedTypeError unless the key names a jpg, jpeg or png file."""
        resolved = resolve_image_key(source.key)
        if resolved is None:
            raise UnrecognizedTypeError(f"Skipping non-image {source.key}")
        return resolved

    def build_artifact(
        self, source: SourceReference, image_bytes: bytes, media_type: MediaType
    ) -> DerivedArtifact:
        return DerivedArtifact(
            destination_bucket=self._config.destination_bucket,
            destination_key=image_dest_key(source.key),
            content_type=media_type.content_type,
            payload=image_bytes,
            content_length=len(image_bytes),
        )

    def run(self, source: SourceReference, correlation_id: Optional[str] = None) -> PipelineResult:
        """
        Process one image upload.

        Returns:
            A ``published`` result with the destination key, or a ``skipped``
            result when the key is not a supported image

        Raises:
            ObjectStoreError: If the source cannot be read
            DecodeError: If the source is not a valid image
            PublishError: If the resized image cannot be written
        """
        start_time = time.time()
        log_context = LogContext(
            operation="resize_image", component="image_resize_pipeline"
        ).with_metadata(source_bucket=source.bucket, source_key=source.key)
        if correlation_id:
            log_context.correlation_id = correlation_id

        result = PipelineResult(source_bucket=source.bucket, source_key=source.key)

        try:
            resolved = self.resolve(source)
        except UnrecognizedTypeError as exc:
            self._logger.info(str(exc), log_context)
            result.status = "skipped"
            result.reason = str(exc)
            return result

        media_type = resolved.media_type
        image_bytes = self._object_store.fetch_bytes(source)
        self._logger.debug(
            "Downloaded source image", log_context, size_bytes=len(image_bytes)
        )

        resized_bytes = self._resizer.resize(image_bytes, media_type)
        artifact = self.build_artifact(source, resized_bytes, media_type)

        self._object_store.publish(artifact)
        result.published_keys.append(artifact.destination_key)
        result.processing_time = time.time() - start_time

        self._logger.info(
            f"Successfully resized {source.bucket}/{source.key} and uploaded to "
            f"{artifact.destination_bucket}/{artifact.destination_key}",
            log_context,
            processing_time_ms=result.processing_time * 1000,
        )
        return result


class SegmentTranscodeService:
    """Stages a video, runs the encoder and collects its output."""

    def __init__(self, encoder: EncoderProtocol, config: PipelineConfig, logger: LoggerProtocol):
        self._encoder = encoder
        self._config = config
        self._logger = logger

    def select_artifacts(self, files: List[ScratchFile], video_base: str) -> List[ScratchFile]:
        """
        Keep the manifest and segments belonging to ``video_base``.

        Segments are ordered by index and the manifest is placed last.
        """
        accepted = [f for f in files if is_segment_artifact(f.name, video_base)]
        return sorted(accepted, key=lambda f: segment_sort_key(f.name))

    def to_artifact(self, scratch_file: ScratchFile) -> DerivedArtifact:
        return DerivedArtifact(
            destination_bucket=self._config.destination_bucket,
            destination_key=segment_dest_key(
                self._config.destination_folder, scratch_file.name
            ),
            source_path=scratch_file.path,
            content_length=scratch_file.size,
        )

    def transcode(
        self,
        source_stream: BinaryIO,
        video_base: str,
        extension: str,
        scratch: ScratchSpaceProtocol,
    ) -> List[DerivedArtifact]:
        """
        Turn a source video into publishable HLS artifacts.

        Args:
            source_stream: Readable body of the uploaded video
            video_base: Base name of the video
            extension: Extension of the uploaded file
            scratch: Workspace receiving input and encoder output

        Returns:
            Artifacts for the manifest and every media segment

        Raises:
            EncoderError: If the encoder fails or times out
            ScratchIOError: If the scratch directory cannot be written or read
        """
        input_path = scratch.write_stream(source_stream, f"{video_base}.{extension}")
        self._logger.debug(
            f"Saved source video to {input_path}", size_bytes=os.path.getsize(input_path)
        )

        self._encoder.encode(input_path, video_base, scratch.path)

        candidates = self.select_artifacts(scratch.list_files(), video_base)
        for candidate in candidates:
            self._logger.info(f"Found file: {candidate.name}")

        if not any(c.name == manifest_name(video_base) for c in candidates):
            self._logger.warning(f"Encoder produced no manifest for {video_base}")

        return [self.to_artifact(c) for c in candidates]


ScratchFactory = Callable[[str], ScratchWorkspace]


class SegmentPipeline:
    """Fetch a video, segment it into HLS output and publish every file."""

    def __init__(
        self,
        object_store: ObjectStoreService,
        transcoder: SegmentTranscodeService,
        config: PipelineConfig,
        logger: LoggerProtocol,
        scratch_factory: Optional[ScratchFactory] = None,
    ):
        self._object_store = object_store
        self._transcoder = transcoder
        self._config = config
        self._logger = logger
        self._scratch_factory = scratch_factory or (
            lambda namespace: ScratchWorkspace(config.scratch_dir, namespace)
        )

    def resolve(self, source: SourceReference) -> ResolvedKey:
        """Raise UnrecognizedTypeError unless the key names an allowed video file."""
        resolved = resolve_video_key(source.key, self._config.video_extensions)
        if resolved is None:
            raise UnrecognizedTypeError(f"Skipping non-video {source.key}")
        return resolved

    def run(self, source: SourceReference, correlation_id: Optional[str] = None) -> PipelineResult:
        """
        Process one video upload.

        Returns:
            A ``published`` result listing every key written, or a ``skipped``
            result when the extension is not allowed

        Raises:
            ObjectStoreError: If the source cannot be read
            EncoderError: If encoding fails or times out
            PublishError: On the first artifact that cannot be written
        """
        start_time = time.time()
        log_context = LogContext(
            operation="create_segments", component="segment_pipeline"
        ).with_metadata(source_bucket=source.bucket, source_key=source.key)
        if correlation_id:
            log_context.correlation_id = correlation_id

        result = PipelineResult(source_bucket=source.bucket, source_key=source.key)

        try:
            resolved = self.resolve(source)
        except UnrecognizedTypeError as exc:
            self._logger.info(str(exc), log_context)
            result.status = "skipped"
            result.reason = str(exc)
            return result

        with self._scratch_factory(log_context.correlation_id) as scratch:
            body = self._object_store.open_source(source)
            try:
                artifacts = self._transcoder.transcode(
                    body, resolved.base_name, resolved.extension, scratch
                )
            finally:
                close_body(body)

            self._logger.info(
                f"Publishing {len(artifacts)} files", log_context,
                destination=f"{self._config.destination_bucket}/{self._config.destination_folder}",
            )
            result.published_keys = self._object_store.publish_all(artifacts)

        result.processing_time = time.time() - start_time
        self._logger.info(
            "Segments published",
            log_context,
            count=len(result.published_keys),
            processing_time_ms=result.processing_time * 1000,
        )
        return result
