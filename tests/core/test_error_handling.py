# tests/core/test_error_handling.py

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError
from PIL import UnidentifiedImageError

from media_pipeline.core.error_handling import (
    service_error_message,
    with_error_handling,
    with_publish_error_handling,
)
from media_pipeline.core.exceptions import (
    DecodeError,
    EncoderError,
    ObjectStoreError,
    PublishError,
    ScratchIOError,
)
from media_pipeline.core.models import DerivedArtifact


def _client_error(message="Access Denied", code="AccessDenied", operation="PutObject"):
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


# --- service_error_message ---

def test_service_error_message_from_client_error():
    assert service_error_message(_client_error("The bucket is gone")) == "The bucket is gone"


def test_service_error_message_falls_back_to_str():
    assert service_error_message(RuntimeError("boom")) == "boom"


def test_service_error_message_without_message_field():
    error = ClientError({"Error": {"Code": "500"}}, "GetObject")
    assert "GetObject" in service_error_message(error)


# --- @with_error_handling ---

@pytest.mark.parametrize(
    "raised,expected",
    [
        (_client_error(operation="GetObject"), ObjectStoreError),
        (EndpointConnectionError(endpoint_url="https://s3.example"), ObjectStoreError),
        (UnidentifiedImageError("cannot identify image file"), DecodeError),
        (PermissionError("read-only file system"), ScratchIOError),
    ],
)
def test_with_error_handling_translates(raised, expected):
    @with_error_handling
    def operation():
        raise raised

    with pytest.raises(expected) as exc_info:
        operation()
    assert exc_info.value.__cause__ is raised


def test_with_error_handling_keeps_pipeline_errors():
    original = EncoderError("exit 1", returncode=1)

    @with_error_handling
    def operation():
        raise original

    with pytest.raises(EncoderError) as exc_info:
        operation()
    assert exc_info.value is original


def test_with_error_handling_leaves_other_errors_alone():
    @with_error_handling
    def operation():
        raise ValueError("bad argument")

    with pytest.raises(ValueError):
        operation()


def test_with_error_handling_returns_value():
    @with_error_handling
    def operation(x, y=1):
        return x + y

    assert operation(1, y=2) == 3
    assert operation.__name__ == "operation"


def test_with_error_handling_logs_service_message(caplog):
    @with_error_handling
    def download():
        raise _client_error("Slow down please", operation="GetObject")

    with caplog.at_level("ERROR"):
        with pytest.raises(ObjectStoreError, match="Slow down please"):
            download()
    assert "Slow down please" in caplog.text


# --- @with_publish_error_handling ---

def _artifact():
    return DerivedArtifact(
        destination_bucket="dest", destination_key="hls/vid_000.ts", payload=b"x", content_length=1
    )


def test_publish_errors_become_publish_error():
    @with_publish_error_handling
    def publish(artifact):
        raise _client_error("Access Denied")

    with pytest.raises(PublishError, match="Access Denied") as exc_info:
        publish(_artifact())
    assert exc_info.value.bucket == "dest"
    assert exc_info.value.key == "hls/vid_000.ts"


def test_publish_error_accepts_keyword_artifact():
    @with_publish_error_handling
    def publish(artifact=None):
        raise _client_error("Access Denied")

    with pytest.raises(PublishError) as exc_info:
        publish(artifact=_artifact())
    assert exc_info.value.key == "hls/vid_000.ts"


def test_publish_does_not_relabel_scratch_errors():
    @with_publish_error_handling
    def publish(artifact):
        raise ScratchIOError("segment vanished")

    with pytest.raises(ScratchIOError, match="segment vanished"):
        publish(_artifact())


def test_publish_success_passes_through():
    @with_publish_error_handling
    def publish(artifact):
        return artifact.destination_key

    assert publish(_artifact()) == "hls/vid_000.ts"
