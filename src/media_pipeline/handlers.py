"""AWS Lambda entry points for the upload handlers.

Configure the function handler as ``media_pipeline.handlers.resize_image_handler``
or ``media_pipeline.handlers.create_segments_handler``.
"""

from typing import Any, Dict, Optional

from .core.events import parse_upload_event
from .core.exceptions import MediaPipelineError
from .core.factories import PipelineFactory
from .core.logging_config import get_logger
from .core.models import PipelineConfig
from .core.observability import correlation_id_from
from .core.services import ImageResizePipeline, SegmentPipeline

logger = get_logger("media-pipeline.handlers")

# Built on first use and reused by warm containers
_image_pipeline: Optional[ImageResizePipeline] = None
_segment_pipeline: Optional[SegmentPipeline] = None


def _get_image_pipeline() -> ImageResizePipeline:
    global _image_pipeline
    if _image_pipeline is None:
        _image_pipeline = PipelineFactory.create_image_pipeline(PipelineConfig.from_env())
    return _image_pipeline


def _get_segment_pipeline() -> SegmentPipeline:
    global _segment_pipeline
    if _segment_pipeline is None:
        _segment_pipeline = PipelineFactory.create_segment_pipeline(PipelineConfig.from_env())
    return _segment_pipeline


def handle_image_upload(
    event: Dict[str, Any], context: Any, pipeline: ImageResizePipeline
) -> Dict[str, Any]:
    """
    Resize the image named by an upload notification.

    Args:
        event: S3 notification
        context: Lambda context, used for the correlation id
        pipeline: Pipeline to run

    Returns:
        Serialized PipelineResult

    Raises:
        MediaPipelineError: Logged here, then re-raised so the runtime sees
            the invocation fail
    """
    correlation_id = correlation_id_from(context)
    try:
        source = parse_upload_event(event, logger)
        result = pipeline.run(source, correlation_id=correlation_id)
    except MediaPipelineError as exc:
        logger.error(f"[{correlation_id}] Image resize failed: {type(exc).__name__}: {exc}")
        raise
    return result.model_dump()


def handle_video_upload(
    event: Dict[str, Any], context: Any, pipeline: SegmentPipeline
) -> Dict[str, Any]:
    """
    Segment the video named by an upload notification into HLS output.

    Args:
        event: S3 notification
        context: Lambda context, used for the correlation id and scratch namespace
        pipeline: Pipeline to run

    Returns:
        Serialized PipelineResult

    Raises:
        MediaPipelineError: Logged here, then re-raised so the runtime sees
            the invocation fail
    """
    correlation_id = correlation_id_from(context)
    try:
        source = parse_upload_event(event, logger)
        result = pipeline.run(source, correlation_id=correlation_id)
    except MediaPipelineError as exc:
        logger.error(f"[{correlation_id}] Segment creation failed: {type(exc).__name__}: {exc}")
        raise
    return result.model_dump()


def resize_image_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """Lambda handler for image uploads."""
    return handle_image_upload(event, context, _get_image_pipeline())


def create_segments_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """Lambda handler for video uploads."""
    return handle_video_upload(event, context, _get_segment_pipeline())
