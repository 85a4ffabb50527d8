"""Survey response and answer models."""
from __future__ import annotations

import uuid
from datetime import datetime, UTC

from sqlalchemy import Column, DateTime, ForeignKey, String, Text, Index
from sqlalchemy.orm import relationship

from survey_engine.database import Base
from survey_engine.models.base import get_uuid_column


class SurveyResponse(Base):
    """One respondent's attempt at a survey; in progress until completed_at is set."""

    __tablename__ = "survey_responses"

    response_id = get_uuid_column(primary_key=True, default=uuid.uuid4)
    survey_id = get_uuid_column(
        ForeignKey("surveys.survey_id", ondelete="CASCADE"), nullable=False, index=True
    )
    respondent_id = get_uuid_column(nullable=True, index=True)
    lobby_intensity = Column(String(32), nullable=True)
    started_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
    )
    completed_at = Column(DateTime(timezone=True), nullable=True)

    survey = relationship("Survey", back_populates="responses")
    answers = relationship(
        "SurveyAnswer",
        back_populates="response",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("ix_survey_responses_survey_completed", "survey_id", "completed_at"),
    )

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None

    def __repr__(self) -> str:
        return (
            f"<SurveyResponse(response_id={self.response_id}, survey_id={self.survey_id}, "
            f"completed_at={self.completed_at})>"
        )


class SurveyAnswer(Base):
    """Serialized answer of one response to one question."""

    __tablename__ = "survey_answers"

    answer_id = get_uuid_column(primary_key=True, default=uuid.uuid4)
    response_id = get_uuid_column(
        ForeignKey("survey_responses.response_id", ondelete="CASCADE"), nullable=False, index=True
    )
    question_id = get_uuid_column(
        ForeignKey("survey_questions.question_id", ondelete="CASCADE"), nullable=False, index=True
    )
    answer = Column(Text, nullable=False)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
    )

    response = relationship("SurveyResponse", back_populates="answers")
    question = relationship("SurveyQuestion")

    def __repr__(self) -> str:
        return f"<SurveyAnswer(answer_id={self.answer_id}, question_id={self.question_id})>"
