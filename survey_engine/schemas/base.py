"""Base schemas with common configuration."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, model_serializer

from survey_engine.utils.datetime_helpers import ensure_utc


def serialize_datetime_utc(dt: datetime) -> str:
    """
    Serialize datetime to ISO 8601 with a 'Z' suffix.

    SQLite stores datetimes as naive strings, so naive values are treated as UTC.
    """
    return ensure_utc(dt).isoformat().replace('+00:00', 'Z')


class BaseSchema(BaseModel):
    """Base schema shared by request payloads, results and exports."""

    model_config = ConfigDict(
        from_attributes=True,
    )

    @model_serializer(mode="wrap")
    def serialize_model(self, handler):
        """Serialize model values with UTC datetime handling."""

        def _convert(value):
            if isinstance(value, datetime):
                return serialize_datetime_utc(value)
            if isinstance(value, list):
                return [_convert(item) for item in value]
            if isinstance(value, dict):
                return {key: _convert(item) for key, item in value.items()}
            return value

        data = handler(self)
        return {key: _convert(value) for key, value in data.items()}
