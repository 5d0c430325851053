"""Factory classes for creating configured pipeline instances."""

from typing import Any, Optional

import boto3

from .encoder import FfmpegEncoder
from .models import PipelineConfig
from .observability import StructuredLogger
from .protocols import EncoderProtocol, LoggerProtocol, ObjectStoreProtocol
from .services import (
    ImageResizePipeline,
    ImageResizeService,
    ObjectStoreService,
    SegmentPipeline,
    SegmentTranscodeService,
)


class LoggerFactory:
    """Factory for creating logger instances."""

    @staticmethod
    def create_logger(name: str, level: Optional[str] = None) -> LoggerProtocol:
        """Create a configured structured logger."""
        return StructuredLogger(name, level=level)


class S3ClientFactory:
    """Factory for creating S3 client instances."""

    @staticmethod
    def create_s3_client(**kwargs: Any) -> ObjectStoreProtocol:
        """Create S3 client with optional configuration (region, endpoint, ...)."""
        session = boto3.Session()
        return session.client("s3", **kwargs)  # type: ignore


class PipelineFactory:
    """Factory for creating the two upload pipelines."""

    @staticmethod
    def create_image_pipeline(
        config: PipelineConfig,
        s3_client: Optional[ObjectStoreProtocol] = None,
        logger: Optional[LoggerProtocol] = None,
    ) -> ImageResizePipeline:
        """Create a fully configured image resize pipeline."""
        if s3_client is None:
            s3_client = S3ClientFactory.create_s3_client()

        if logger is None:
            logger = LoggerFactory.create_logger("media-pipeline.image")

        return ImageResizePipeline(
            object_store=ObjectStoreService(s3_client, logger),
            resizer=ImageResizeService(config.thumbnail_size),
            config=config,
            logger=logger,
        )

    @staticmethod
    def create_segment_pipeline(
        config: PipelineConfig,
        s3_client: Optional[ObjectStoreProtocol] = None,
        logger: Optional[LoggerProtocol] = None,
        encoder: Optional[EncoderProtocol] = None,
    ) -> SegmentPipeline:
        """Create a fully configured HLS segment pipeline."""
        if s3_client is None:
            s3_client = S3ClientFactory.create_s3_client()

        if logger is None:
            logger = LoggerFactory.create_logger("media-pipeline.segments")

        if encoder is None:
            encoder = FfmpegEncoder(
                config.encoder_path,
                logger,
                resolution=config.target_resolution,
                segment_duration_seconds=config.segment_duration_seconds,
                timeout_seconds=config.encoder_timeout_seconds,
            )

        return SegmentPipeline(
            object_store=ObjectStoreService(s3_client, logger),
            transcoder=SegmentTranscodeService(encoder, config, logger),
            config=config,
            logger=logger,
        )
