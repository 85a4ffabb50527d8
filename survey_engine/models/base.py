"""Base utilities for SQLAlchemy models."""
from enum import Enum
import uuid
from sqlalchemy import Column, String
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.sql import sqltypes


class SurveyType(str, Enum):
    """Survey flavor enumeration for type safety."""
    QUICK_POLL = "quick_poll"
    DETAILED_SURVEY = "detailed_survey"
    NPS_SURVEY = "nps_survey"
    FEATURE_PRIORITY = "feature_priority"


class SurveyStatus(str, Enum):
    """Survey lifecycle status enumeration for type safety."""
    DRAFT = "draft"
    PUBLISHED = "published"
    CLOSED = "closed"


class QuestionType(str, Enum):
    """Question type enumeration for type safety."""
    MULTIPLE_CHOICE = "multiple_choice"
    RATING_SCALE = "rating_scale"
    OPEN_TEXT = "open_text"
    RANKING = "ranking"
    MATRIX = "matrix"


class LobbyIntensity(str, Enum):
    """Commitment level a respondent can declare alongside a response."""
    NEAT_IDEA = "neat_idea"
    PROBABLY_BUY = "probably_buy"
    TAKE_MY_MONEY = "take_my_money"


class AdaptiveUUID(sqltypes.TypeDecorator):
    """UUID type that is native on PostgreSQL and hex text elsewhere."""

    impl = sqltypes.String
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(PGUUID(as_uuid=True))
        return dialect.type_descriptor(String(36))

    @staticmethod
    def _coerce_uuid(value):
        if value is None or isinstance(value, uuid.UUID):
            return value
        return uuid.UUID(str(value))

    def process_bind_param(self, value, dialect):
        value = self._coerce_uuid(value)
        if value is None or dialect.name == "postgresql":
            return value
        return value.hex

    def process_result_value(self, value, dialect):
        return self._coerce_uuid(value)


def get_uuid_column(*args, **kwargs):
    """Get UUID column type based on database dialect.

    Args:
        *args: Positional arguments to pass to Column (e.g., ForeignKey)
        **kwargs: Keyword arguments to pass to Column (e.g., primary_key=True)

    Returns:
        Column: Configured SQLAlchemy Column for UUID storage

    Example:
        survey_id = get_uuid_column(primary_key=True, default=uuid.uuid4)
        foreign_id = get_uuid_column(ForeignKey("surveys.survey_id"), nullable=True)
    """
    return Column(AdaptiveUUID(), *args, **kwargs)
