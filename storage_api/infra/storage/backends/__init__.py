"""Storage backends package."""

from .protocol import BucketInfo, PutResult, StorageBackend

__all__ = [
    "BucketInfo",
    "PutResult",
    "StorageBackend",
]
