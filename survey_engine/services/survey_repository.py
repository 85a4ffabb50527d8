"""Persistence access for surveys, questions, responses and answers."""
import json
import logging
from datetime import datetime
from typing import Any, Optional
from uuid import UUID
import uuid

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from survey_engine.models import Survey, SurveyAnswer, SurveyQuestion, SurveyResponse
from survey_engine.models.base import SurveyStatus
from survey_engine.schemas.survey import QuestionCreate, SurveyCreate
from survey_engine.utils.exceptions import (
    QuestionNotFoundError,
    ResponseNotFoundError,
    SurveyNotFoundError,
)

logger = logging.getLogger(__name__)


def serialize_answer(value: Any) -> str:
    """Strings are stored verbatim, everything else as JSON."""
    if isinstance(value, str):
        return value
    return json.dumps(value)


class SurveyRepository:
    """Reads and writes survey rows on behalf of the engine services.

    Writes only flush; committing is left to the calling service.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def load_survey(self, survey_id: UUID) -> Survey:
        result = await self.db.execute(select(Survey).where(Survey.survey_id == survey_id))
        survey = result.scalar_one_or_none()
        if not survey:
            raise SurveyNotFoundError(f"Survey not found: {survey_id}")
        return survey

    async def load_questions(self, survey_id: UUID) -> list[SurveyQuestion]:
        result = await self.db.execute(
            select(SurveyQuestion)
            .where(SurveyQuestion.survey_id == survey_id)
            .order_by(SurveyQuestion.order_index, SurveyQuestion.question_id)
        )
        return list(result.scalars().all())

    async def load_question(self, question_id: UUID) -> SurveyQuestion:
        result = await self.db.execute(
            select(SurveyQuestion).where(SurveyQuestion.question_id == question_id)
        )
        question = result.scalar_one_or_none()
        if not question:
            raise QuestionNotFoundError(f"Question not found: {question_id}")
        return question

    async def load_responses_with_answers(
        self,
        survey_id: UUID,
        lobby_intensity: Optional[str] = None,
    ) -> list[SurveyResponse]:
        """Load every response of a survey with its answers eagerly attached.

        Args:
            survey_id: Survey UUID
            lobby_intensity: Restrict to responses tagged with this intensity

        Returns:
            Responses in start order
        """
        query = (
            select(SurveyResponse)
            .where(SurveyResponse.survey_id == survey_id)
            .options(selectinload(SurveyResponse.answers))
            .order_by(SurveyResponse.started_at)
        )
        if lobby_intensity is not None:
            query = query.where(SurveyResponse.lobby_intensity == lobby_intensity)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def load_response(self, response_id: UUID) -> SurveyResponse:
        result = await self.db.execute(
            select(SurveyResponse).where(SurveyResponse.response_id == response_id)
        )
        response = result.scalar_one_or_none()
        if not response:
            raise ResponseNotFoundError(f"Survey response not found: {response_id}")
        return response

    async def count_started_responses(self, survey_id: UUID) -> int:
        """Return the denormalized started-count stored on the survey row."""
        result = await self.db.execute(
            select(Survey.response_count).where(Survey.survey_id == survey_id)
        )
        count = result.scalar_one_or_none()
        if count is None:
            raise SurveyNotFoundError(f"Survey not found: {survey_id}")
        return int(count)

    async def count_completed_responses(self, survey_id: UUID) -> int:
        result = await self.db.execute(
            select(func.count())
            .select_from(SurveyResponse)
            .where(
                SurveyResponse.survey_id == survey_id,
                SurveyResponse.completed_at.is_not(None),
            )
        )
        return int(result.scalar_one())

    async def persist_completion_rate(self, survey_id: UUID, rate: float) -> None:
        await self.db.execute(
            update(Survey).where(Survey.survey_id == survey_id).values(completion_rate=rate)
        )

    async def persist_lifecycle_transition(
        self, survey: Survey, status: SurveyStatus, timestamp: datetime
    ) -> None:
        survey.status = status.value
        if status is SurveyStatus.PUBLISHED:
            survey.published_at = timestamp
        elif status is SurveyStatus.CLOSED:
            survey.closed_at = timestamp
        await self.db.flush()

    async def create_survey(self, payload: SurveyCreate) -> Survey:
        survey = Survey(
            survey_id=uuid.uuid4(),
            creator_id=payload.creator_id,
            title=payload.title,
            description=payload.description,
            survey_type=payload.survey_type.value,
            status=SurveyStatus.DRAFT.value,
            response_count=0,
            completion_rate=0.0,
        )
        self.db.add(survey)
        for index, question in enumerate(payload.questions):
            self.db.add(self._build_question(survey.survey_id, index, question))
        await self.db.flush()
        return survey

    @staticmethod
    def _build_question(survey_id: UUID, order_index: int, question: QuestionCreate) -> SurveyQuestion:
        return SurveyQuestion(
            question_id=uuid.uuid4(),
            survey_id=survey_id,
            question=question.question,
            description=question.description,
            question_type=question.question_type.value,
            required=question.required,
            order_index=order_index,
            options=question.options,
            min_scale=question.min_scale,
            max_scale=question.max_scale,
            min_label=question.min_label,
            max_label=question.max_label,
            matrix_rows=question.matrix_rows,
            matrix_columns=question.matrix_columns,
        )

    async def create_response(
        self,
        survey_id: UUID,
        respondent_id: Optional[UUID] = None,
        lobby_intensity: Optional[str] = None,
    ) -> SurveyResponse:
        """Insert an in-progress response and bump the survey's started-count."""
        response = SurveyResponse(
            response_id=uuid.uuid4(),
            survey_id=survey_id,
            respondent_id=respondent_id,
            lobby_intensity=lobby_intensity,
        )
        self.db.add(response)
        await self.db.execute(
            update(Survey)
            .where(Survey.survey_id == survey_id)
            .values(response_count=Survey.response_count + 1)
        )
        await self.db.flush()
        return response

    async def append_answer(self, response_id: UUID, question_id: UUID, value: Any) -> SurveyAnswer:
        answer = SurveyAnswer(
            answer_id=uuid.uuid4(),
            response_id=response_id,
            question_id=question_id,
            answer=serialize_answer(value),
        )
        self.db.add(answer)
        await self.db.flush()
        return answer

    async def mark_response_completed(self, response: SurveyResponse, timestamp: datetime) -> None:
        response.completed_at = timestamp
        await self.db.flush()
