"""Survey question model."""
from __future__ import annotations

import uuid

from sqlalchemy import Boolean, Column, ForeignKey, Integer, JSON, String, Text, Index
from sqlalchemy.orm import relationship

from survey_engine.database import Base
from survey_engine.models.base import get_uuid_column


class SurveyQuestion(Base):
    """One typed prompt within a survey.

    Type-specific configuration lives in dedicated columns: ``options`` for
    multiple-choice and ranking questions, the scale bounds and labels for
    rating-scale questions, and the row/column label lists for matrix questions.
    """

    __tablename__ = "survey_questions"

    question_id = get_uuid_column(primary_key=True, default=uuid.uuid4)
    survey_id = get_uuid_column(
        ForeignKey("surveys.survey_id", ondelete="CASCADE"), nullable=False, index=True
    )
    question = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    question_type = Column(String(32), nullable=False)
    required = Column(Boolean, nullable=False, default=False)
    order_index = Column(Integer, nullable=False, default=0)

    options = Column(JSON, nullable=True)
    min_scale = Column(Integer, nullable=True)
    max_scale = Column(Integer, nullable=True)
    min_label = Column(String(100), nullable=True)
    max_label = Column(String(100), nullable=True)
    matrix_rows = Column(JSON, nullable=True)
    matrix_columns = Column(JSON, nullable=True)

    survey = relationship("Survey", back_populates="questions")

    __table_args__ = (
        Index("ix_survey_questions_survey_order", "survey_id", "order_index"),
    )

    def __repr__(self) -> str:
        return (
            f"<SurveyQuestion(question_id={self.question_id}, survey_id={self.survey_id}, "
            f"question_type={self.question_type})>"
        )
