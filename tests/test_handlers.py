"""Tests for the Lambda entry points."""

from types import SimpleNamespace
from unittest.mock import patch

import pytest

from media_pipeline import handlers
from media_pipeline.core.exceptions import ConfigurationError, DecodeError, EventParseError
from media_pipeline.testing.fakes import (
    FakeEncoder,
    create_test_image,
    make_s3_event,
    setup_test_s3_environment,
)


@pytest.fixture(autouse=True)
def reset_cached_pipelines(monkeypatch):
    monkeypatch.setattr(handlers, "_image_pipeline", None)
    monkeypatch.setattr(handlers, "_segment_pipeline", None)


@pytest.fixture
def env(monkeypatch, tmp_path):
    monkeypatch.setenv("DESTINATION_BUCKET", "test-dest")
    monkeypatch.setenv("DESTINATION_FOLDER", "hls")
    monkeypatch.setenv("SCRATCH_DIR", str(tmp_path))


def test_resize_image_handler_builds_pipeline_from_env(env):
    fake_s3 = setup_test_s3_environment()
    context = SimpleNamespace(aws_request_id="req-1")

    with patch(
        "media_pipeline.core.factories.S3ClientFactory.create_s3_client", return_value=fake_s3
    ) as mock_factory:
        first = handlers.resize_image_handler(make_s3_event("test-source", "photo.jpg"), context)
        handlers.resize_image_handler(make_s3_event("test-source", "logo.png"), context)

    assert first["published_keys"] == ["resized-photo.jpg"]
    assert mock_factory.call_count == 1
    assert set(fake_s3.get_bucket("test-dest").objects) == {"resized-photo.jpg", "resized-logo.png"}


def test_create_segments_handler_uses_configured_folder(env):
    fake_s3 = setup_test_s3_environment()

    with patch(
        "media_pipeline.core.factories.S3ClientFactory.create_s3_client", return_value=fake_s3
    ), patch("media_pipeline.core.factories.FfmpegEncoder", return_value=FakeEncoder(segment_count=1)):
        result = handlers.create_segments_handler(
            make_s3_event("test-source", "clip.mp4"), SimpleNamespace(aws_request_id="req-2")
        )

    assert result["published_keys"] == ["hls/clip_000.ts", "hls/clip.m3u8"]


def test_handler_without_destination_bucket_fails(monkeypatch):
    monkeypatch.delenv("DESTINATION_BUCKET", raising=False)

    with pytest.raises(ConfigurationError):
        handlers.resize_image_handler(make_s3_event("test-source", "photo.jpg"), None)


def test_handler_rejects_empty_event(env):
    fake_s3 = setup_test_s3_environment()
    with patch(
        "media_pipeline.core.factories.S3ClientFactory.create_s3_client", return_value=fake_s3
    ):
        with pytest.raises(EventParseError):
            handlers.resize_image_handler({"Records": []}, None)


def test_handler_logs_failures(env):
    fake_s3 = setup_test_s3_environment()
    fake_s3.get_bucket("test-source").add_object("bad.jpg", create_test_image(10, 10, image_format="PNG"))

    with patch(
        "media_pipeline.core.factories.S3ClientFactory.create_s3_client", return_value=fake_s3
    ), patch.object(handlers.logger, "error") as mock_error:
        with pytest.raises(DecodeError):
            handlers.resize_image_handler(make_s3_event("test-source", "bad.jpg"), None)

    assert "DecodeError" in mock_error.call_args[0][0]
