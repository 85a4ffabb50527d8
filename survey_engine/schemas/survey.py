"""Pydantic schemas for survey definitions, compiled results and insights."""
from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Literal, Optional, Union
from uuid import UUID

from pydantic import Field, model_validator

from survey_engine.models.base import LobbyIntensity, QuestionType, SurveyType
from survey_engine.schemas.base import BaseSchema


# ---------------------------------------------------------------------------
# Question configuration variants
# ---------------------------------------------------------------------------

class MultipleChoiceConfig(BaseSchema):
    type: Literal["multiple_choice"] = "multiple_choice"
    options: list[str] = Field(default_factory=list)


class RatingScaleConfig(BaseSchema):
    type: Literal["rating_scale"] = "rating_scale"
    min_scale: int = 1
    max_scale: int = 5
    min_label: Optional[str] = None
    max_label: Optional[str] = None


class OpenTextConfig(BaseSchema):
    type: Literal["open_text"] = "open_text"


class RankingConfig(BaseSchema):
    type: Literal["ranking"] = "ranking"
    items: list[str] = Field(default_factory=list)


class MatrixConfig(BaseSchema):
    type: Literal["matrix"] = "matrix"
    rows: list[str] = Field(default_factory=list)
    columns: list[str] = Field(default_factory=list)


QuestionConfig = Annotated[
    Union[MultipleChoiceConfig, RatingScaleConfig, OpenTextConfig, RankingConfig, MatrixConfig],
    Field(discriminator="type"),
]


# ---------------------------------------------------------------------------
# Per-question summaries
# ---------------------------------------------------------------------------

class OptionCount(BaseSchema):
    option: str
    count: int
    percentage: float


class MultipleChoiceSummary(BaseSchema):
    """Pick counts for every declared option, most picked first."""

    type: Literal["multiple_choice"] = "multiple_choice"
    options: list[OptionCount]


class ScaleBucket(BaseSchema):
    scale: int
    count: int
    percentage: float


class RatingScaleSummary(BaseSchema):
    """Central tendency over valid ratings.

    ``min``/``max`` are the observed extremes, ``scale_min``/``scale_max`` the
    configured bounds that the distribution buckets span.
    """

    type: Literal["rating_scale"] = "rating_scale"
    average: float
    median: float
    min: int
    max: int
    scale_min: int
    scale_max: int
    distribution: list[ScaleBucket]


class TextCount(BaseSchema):
    response: str
    count: int


class OpenTextSummary(BaseSchema):
    type: Literal["open_text"] = "open_text"
    responses: list[TextCount]
    total_responses: int


class ItemRanking(BaseSchema):
    item: str
    average_rank: float
    total_ranks: int


class RankingSummary(BaseSchema):
    """Items ordered by average 1-based position, most preferred first."""

    type: Literal["ranking"] = "ranking"
    item_rankings: list[ItemRanking]


class MatrixRow(BaseSchema):
    row: str
    column_averages: dict[str, float]


class MatrixSummary(BaseSchema):
    type: Literal["matrix"] = "matrix"
    rows: list[MatrixRow]


QuestionSummary = Annotated[
    Union[MultipleChoiceSummary, RatingScaleSummary, OpenTextSummary, RankingSummary, MatrixSummary],
    Field(discriminator="type"),
]


# ---------------------------------------------------------------------------
# Compiled results
# ---------------------------------------------------------------------------

class QuestionResult(BaseSchema):
    """Aggregated answers of one question; summary is None when there is nothing to show."""

    question_id: UUID
    question: str
    question_type: str
    response_count: int
    summary: Optional[QuestionSummary] = None


class SurveyResults(BaseSchema):
    survey_id: UUID
    title: str
    description: Optional[str] = None
    survey_type: str
    status: str
    total_responses: int
    completion_rate: float
    question_results: list[QuestionResult]


class SurveyInsight(BaseSchema):
    summary: str
    key_findings: list[str]
    recommendations: list[str]
    nps_score: Optional[float] = None


class SurveyExport(BaseSchema):
    """Encoded results ready to be served as a download."""

    content: str
    filename: str
    media_type: str


# ---------------------------------------------------------------------------
# Lifecycle payloads
# ---------------------------------------------------------------------------

class QuestionCreate(BaseSchema):
    """Question definition supplied when creating a survey."""

    question: str = Field(..., min_length=1)
    question_type: QuestionType
    description: Optional[str] = None
    required: bool = False
    options: Optional[list[str]] = None
    min_scale: Optional[int] = None
    max_scale: Optional[int] = None
    min_label: Optional[str] = Field(None, max_length=100)
    max_label: Optional[str] = Field(None, max_length=100)
    matrix_rows: Optional[list[str]] = None
    matrix_columns: Optional[list[str]] = None

    @model_validator(mode="after")
    def validate_scale(self):
        """Reject inverted rating scales."""
        if (
            self.min_scale is not None
            and self.max_scale is not None
            and self.min_scale > self.max_scale
        ):
            raise ValueError("min_scale must not exceed max_scale")
        return self


class SurveyCreate(BaseSchema):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    survey_type: SurveyType = SurveyType.DETAILED_SURVEY
    creator_id: Optional[UUID] = None
    questions: list[QuestionCreate] = Field(default_factory=list)


class QuestionRecord(BaseSchema):
    question_id: UUID
    question: str
    question_type: str
    required: bool
    order_index: int


class SurveyRecord(BaseSchema):
    """Representation of a stored survey."""

    survey_id: UUID
    title: str
    description: Optional[str] = None
    survey_type: str
    status: str
    response_count: int
    completion_rate: float
    created_at: datetime
    published_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None


class SurveyDetail(SurveyRecord):
    questions: list[QuestionRecord] = Field(default_factory=list)


class ResponseStart(BaseSchema):
    respondent_id: Optional[UUID] = None
    lobby_intensity: Optional[LobbyIntensity] = None


class ResponseSubmission(ResponseStart):
    """One-shot submission: answers keyed by question id."""

    answers: dict[UUID, Any]


class AnswerSubmission(BaseSchema):
    question_id: UUID
    value: Any


class ResponseRecord(BaseSchema):
    response_id: UUID
    survey_id: UUID
    respondent_id: Optional[UUID] = None
    lobby_intensity: Optional[str] = None
    started_at: datetime
    completed_at: Optional[datetime] = None


class CompletionResponse(BaseSchema):
    response_id: UUID
    completion_rate: float
