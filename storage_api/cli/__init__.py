"""Command-line interface for storage-api."""
