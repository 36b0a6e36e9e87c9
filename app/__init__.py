"""AniFlow catalog FastAPI application package."""
