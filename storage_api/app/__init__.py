"""FastAPI application assembly."""
