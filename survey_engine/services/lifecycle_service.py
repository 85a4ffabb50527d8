"""Survey lifecycle and response bookkeeping."""
import logging
from typing import Any, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from survey_engine.models import Survey, SurveyAnswer, SurveyResponse
from survey_engine.models.base import LobbyIntensity, SurveyStatus
from survey_engine.schemas.survey import SurveyCreate
from survey_engine.services.results_service import calculate_completion_rate
from survey_engine.services.survey_repository import SurveyRepository
from survey_engine.utils.datetime_helpers import utc_now
from survey_engine.utils.exceptions import (
    InvalidStateTransitionError,
    MissingRequiredAnswerError,
    QuestionNotFoundError,
)

logger = logging.getLogger(__name__)


def _intensity_value(lobby_intensity: Optional[LobbyIntensity | str]) -> Optional[str]:
    if lobby_intensity is None:
        return None
    return LobbyIntensity(lobby_intensity).value


class LifecycleService:
    """Service for survey state transitions and response completion.

    Surveys move draft -> published -> closed. Closing is accepted from any
    status. Each public method commits its own changes.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.repository = SurveyRepository(db)

    async def create_survey(self, payload: SurveyCreate) -> Survey:
        """Create a draft survey with its questions in the given order."""
        survey = await self.repository.create_survey(payload)
        await self.db.commit()
        logger.info(
            f"Created {payload.survey_type.value} survey {survey.survey_id} "
            f"with {len(payload.questions)} questions"
        )
        return survey

    async def publish_survey(self, survey_id: UUID) -> Survey:
        """
        Publish a draft survey.

        Raises:
            SurveyNotFoundError: If the survey does not exist
            InvalidStateTransitionError: If the survey is not in draft
        """
        survey = await self.repository.load_survey(survey_id)
        if survey.status != SurveyStatus.DRAFT.value:
            raise InvalidStateTransitionError(survey_id, survey.status, SurveyStatus.PUBLISHED.value)

        await self.repository.persist_lifecycle_transition(survey, SurveyStatus.PUBLISHED, utc_now())
        await self.db.commit()
        logger.info(f"Published survey {survey_id}")
        return survey

    async def close_survey(self, survey_id: UUID) -> Survey:
        """Close a survey regardless of its current status."""
        survey = await self.repository.load_survey(survey_id)
        previous_status = survey.status

        await self.repository.persist_lifecycle_transition(survey, SurveyStatus.CLOSED, utc_now())
        await self.db.commit()
        logger.info(f"Closed survey {survey_id} (was {previous_status})")
        return survey

    async def start_response(
        self,
        survey_id: UUID,
        respondent_id: Optional[UUID] = None,
        lobby_intensity: Optional[LobbyIntensity | str] = None,
    ) -> SurveyResponse:
        """Open an in-progress response and count it as started on the survey."""
        await self.repository.load_survey(survey_id)
        response = await self.repository.create_response(
            survey_id,
            respondent_id=respondent_id,
            lobby_intensity=_intensity_value(lobby_intensity),
        )
        await self.db.commit()
        logger.info(f"Started response {response.response_id} for survey {survey_id}")
        return response

    async def submit_answer(self, response_id: UUID, question_id: UUID, value: Any) -> SurveyAnswer:
        """
        Record one answer on a response.

        Raises:
            ResponseNotFoundError: If the response does not exist
            QuestionNotFoundError: If the question does not belong to the response's survey
        """
        response = await self.repository.load_response(response_id)
        question = await self.repository.load_question(question_id)
        if question.survey_id != response.survey_id:
            raise QuestionNotFoundError(
                f"Question {question_id} does not belong to survey {response.survey_id}"
            )

        answer = await self.repository.append_answer(response_id, question_id, value)
        await self.db.commit()
        return answer

    async def complete_response(self, response_id: UUID) -> float:
        """
        Mark a response completed and recompute the survey's completion rate.

        The rate is recomputed from the persisted counts rather than
        incremented, using the survey's stored started-count as denominator.

        Returns:
            The new completion rate, rounded to 2 decimals

        Raises:
            ResponseNotFoundError: If the response does not exist
        """
        response = await self.repository.load_response(response_id)
        await self.repository.mark_response_completed(response, utc_now())

        completed = await self.repository.count_completed_responses(response.survey_id)
        started = await self.repository.count_started_responses(response.survey_id)
        completion_rate = round(calculate_completion_rate(completed, started), 2)

        await self.repository.persist_completion_rate(response.survey_id, completion_rate)
        await self.db.commit()
        logger.info(
            f"Completed response {response_id}; survey {response.survey_id} completion "
            f"now {completion_rate}% ({completed}/{started})"
        )
        return completion_rate

    async def submit_response(
        self,
        survey_id: UUID,
        answers: dict[UUID, Any],
        respondent_id: Optional[UUID] = None,
        lobby_intensity: Optional[LobbyIntensity | str] = None,
    ) -> SurveyResponse:
        """
        Start, fill and complete a response in one call.

        Answers for questions outside the survey are rejected, as are
        submissions that skip a required question. Nothing is written in
        either case.

        Raises:
            SurveyNotFoundError: If the survey does not exist
            QuestionNotFoundError: If an answer targets a foreign question
            MissingRequiredAnswerError: If a required question is unanswered
        """
        await self.repository.load_survey(survey_id)
        questions = await self.repository.load_questions(survey_id)
        question_ids = {question.question_id for question in questions}

        unknown = [question_id for question_id in answers if question_id not in question_ids]
        if unknown:
            raise QuestionNotFoundError(f"Questions not in survey {survey_id}: {unknown}")

        missing = [
            question.question_id
            for question in questions
            if question.required and answers.get(question.question_id) in (None, "", [], {})
        ]
        if missing:
            raise MissingRequiredAnswerError(missing)

        response = await self.repository.create_response(
            survey_id,
            respondent_id=respondent_id,
            lobby_intensity=_intensity_value(lobby_intensity),
        )
        for question in questions:
            if question.question_id in answers:
                await self.repository.append_answer(
                    response.response_id, question.question_id, answers[question.question_id]
                )
        await self.db.commit()

        await self.complete_response(response.response_id)
        return response
