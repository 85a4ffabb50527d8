"""Survey model."""
from __future__ import annotations

import uuid
from datetime import datetime, UTC

from sqlalchemy import Column, DateTime, Float, Integer, String, Text, Index
from sqlalchemy.orm import relationship

from survey_engine.database import Base
from survey_engine.models.base import get_uuid_column, SurveyStatus, SurveyType


class Survey(Base):
    """Top-level questionnaire with a lifecycle and denormalized response counters."""

    __tablename__ = "surveys"

    survey_id = get_uuid_column(primary_key=True, default=uuid.uuid4)
    creator_id = get_uuid_column(nullable=True, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    survey_type = Column(String(32), nullable=False, default=SurveyType.DETAILED_SURVEY.value)
    status = Column(String(16), nullable=False, default=SurveyStatus.DRAFT.value)

    # Denormalized counters, only written by the lifecycle service
    response_count = Column(Integer, nullable=False, default=0)
    completion_rate = Column(Float, nullable=False, default=0.0)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
    )
    published_at = Column(DateTime(timezone=True), nullable=True)
    closed_at = Column(DateTime(timezone=True), nullable=True)

    questions = relationship(
        "SurveyQuestion",
        back_populates="survey",
        cascade="all, delete-orphan",
        order_by="SurveyQuestion.order_index",
    )
    responses = relationship(
        "SurveyResponse",
        back_populates="survey",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("ix_surveys_status", "status"),
    )

    def __repr__(self) -> str:
        return f"<Survey(survey_id={self.survey_id}, title={self.title!r}, status={self.status})>"
