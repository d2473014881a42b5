"""Bucket and object endpoints backed by the storage backend."""

from .router import router

__all__ = ["router"]
