"""S3 upload handlers producing image thumbnails and HLS video segments."""

__version__ = "0.1.0"
