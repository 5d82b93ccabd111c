"""Object storage for uploaded files (post photos)."""

from inkwell.storage.base import ObjectStorage
from inkwell.storage.s3 import S3Storage, get_storage

__all__ = ["ObjectStorage", "S3Storage", "get_storage"]
