"""Core building blocks: settings, schemas and exceptions."""
