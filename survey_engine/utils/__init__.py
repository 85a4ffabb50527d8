"""Utilities module."""
from survey_engine.utils.datetime_helpers import ensure_utc

__all__ = ["ensure_utc"]
