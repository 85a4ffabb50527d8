"""API routers."""
from survey_engine.routers import health, surveys

__all__ = [
    "health",
    "surveys",
]
