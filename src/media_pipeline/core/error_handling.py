# src/media_pipeline/core/error_handling.py

import functools
import logging

from botocore.exceptions import BotoCoreError, ClientError
from PIL import Image, UnidentifiedImageError

from .exceptions import (
    DecodeError,
    MediaPipelineError,
    ObjectStoreError,
    PublishError,
    ScratchIOError,
)


def service_error_message(exc: BaseException) -> str:
    """
    Extract the human readable message from an object store error.

    botocore ``ClientError`` keeps the service message under
    ``response["Error"]["Message"]``; anything else falls back to ``str``.
    """
    if isinstance(exc, ClientError):
        message = exc.response.get("Error", {}).get("Message")
        if message:
            return message
    return str(exc)


def with_error_handling(func):
    """
    A decorator to wrap functions with standardized error handling.

    Pipeline errors pass through untouched. botocore errors become
    ObjectStoreError, Pillow identification failures become DecodeError and
    filesystem errors become ScratchIOError.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger = logging.getLogger(func.__module__ + '.' + func.__name__)
        try:
            return func(*args, **kwargs)
        except MediaPipelineError:
            raise
        except (ClientError, BotoCoreError) as e:
            message = service_error_message(e)
            logger.error(f"Object store operation '{func.__name__}' failed: {message}")
            raise ObjectStoreError(message) from e
        except (UnidentifiedImageError, Image.DecompressionBombError) as e:
            logger.error(f"Failed to decode image in '{func.__name__}': {e}")
            raise DecodeError(str(e)) from e
        except OSError as e:
            logger.error(f"Scratch I/O error in '{func.__name__}': {e}", exc_info=True)
            raise ScratchIOError(str(e)) from e
    return wrapper


def with_publish_error_handling(func):
    """
    A decorator for functions that write an artifact to the object store.

    Object store failures are logged with the service message and re-raised
    as PublishError so callers can stop publishing the remaining artifacts.
    Other errors, such as a ScratchIOError while reading the artifact body,
    propagate unchanged.
    The wrapped function must take the artifact as its last positional
    argument or as ``artifact=``.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger = logging.getLogger(func.__module__ + '.' + func.__name__)
        artifact = kwargs.get("artifact", args[-1] if args else None)
        bucket = getattr(artifact, "destination_bucket", "")
        key = getattr(artifact, "destination_key", "")
        try:
            return func(*args, **kwargs)
        except (ClientError, BotoCoreError) as e:
            message = service_error_message(e)
            logger.error(f"Failed to publish s3://{bucket}/{key}: {message}")
            raise PublishError(message, bucket=bucket, key=key) from e
    return wrapper
