"""Survey results compilation."""
import logging
from collections import defaultdict
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from survey_engine.schemas.survey import QuestionResult, SurveyResults
from survey_engine.services.question_aggregator import build_question_config, summarize_question
from survey_engine.services.survey_repository import SurveyRepository

logger = logging.getLogger(__name__)


def calculate_completion_rate(completed: int, started: int) -> float:
    """Completed responses as a percentage of the started-count.

    The denominator is floored at 1, so a stale started-count of 0 with
    completed responses yields a rate above 100.
    """
    return completed / max(started, 1) * 100


class ResultsService:
    """Service for compiling per-question survey results."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.repository = SurveyRepository(db)

    async def compile_results(
        self,
        survey_id: UUID,
        lobby_intensity: Optional[str] = None,
    ) -> SurveyResults:
        """
        Aggregate every question of a survey over its loaded responses.

        Answers from in-progress responses are included in the per-question
        summaries; only ``total_responses`` and the completion rate look at
        completion.

        Args:
            survey_id: Survey UUID
            lobby_intensity: Only include responses tagged with this intensity;
                the completion rate is then taken over those responses alone

        Returns:
            SurveyResults with one QuestionResult per question, in question order

        Raises:
            SurveyNotFoundError: If the survey does not exist
        """
        survey = await self.repository.load_survey(survey_id)
        questions = await self.repository.load_questions(survey_id)
        responses = await self.repository.load_responses_with_answers(survey_id, lobby_intensity)
        if lobby_intensity is None:
            started = await self.repository.count_started_responses(survey_id)
        else:
            # the survey-wide started-count covers other intensities too
            started = len(responses)

        total_responses = sum(1 for response in responses if response.is_completed)
        completion_rate = calculate_completion_rate(total_responses, started)

        answers_by_question: dict[UUID, list[str]] = defaultdict(list)
        for response in responses:
            for answer in response.answers:
                answers_by_question[answer.question_id].append(answer.answer)

        question_results = []
        for question in questions:
            stored_answers = answers_by_question.get(question.question_id, [])
            config = build_question_config(question)
            question_results.append(
                QuestionResult(
                    question_id=question.question_id,
                    question=question.question,
                    question_type=question.question_type,
                    response_count=len(stored_answers),
                    summary=summarize_question(config, stored_answers),
                )
            )

        logger.info(
            f"Compiled results for survey {survey_id}: {len(questions)} questions, "
            f"{total_responses}/{len(responses)} completed responses, {completion_rate:.1f}% completion"
        )

        return SurveyResults(
            survey_id=survey.survey_id,
            title=survey.title,
            description=survey.description,
            survey_type=survey.survey_type,
            status=survey.status,
            total_responses=total_responses,
            completion_rate=completion_rate,
            question_results=question_results,
        )
