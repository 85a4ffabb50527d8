"""Rule-based insight generation over compiled survey results."""
import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from survey_engine.config import get_settings
from survey_engine.models.base import QuestionType, SurveyType
from survey_engine.schemas.survey import (
    MultipleChoiceSummary,
    OpenTextSummary,
    QuestionResult,
    RatingScaleSummary,
    SurveyInsight,
    SurveyResults,
)
from survey_engine.services.results_service import ResultsService

logger = logging.getLogger(__name__)

SHORTEN_SURVEY_RECOMMENDATION = "Consider shortening the survey to improve completion rates"


class InsightService:
    """Service for turning survey results into findings and recommendations.

    The rules are heuristics, not statistical inference. Rating averages
    strictly between the low and strong thresholds produce no finding.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.settings = get_settings()
        self.results_service = ResultsService(db)

    async def generate_insights(
        self,
        survey_id: UUID,
        lobby_intensity: Optional[str] = None,
    ) -> SurveyInsight:
        """
        Compile results for a survey and derive its insight summary.

        Args:
            survey_id: Survey UUID
            lobby_intensity: Only include responses tagged with this intensity

        Returns:
            SurveyInsight with summary, key findings, recommendations and NPS

        Raises:
            SurveyNotFoundError: If the survey does not exist
        """
        results = await self.results_service.compile_results(survey_id, lobby_intensity)
        return self.synthesize(results)

    def synthesize(self, results: SurveyResults) -> SurveyInsight:
        key_findings: list[str] = []
        recommendations: list[str] = []

        for question_result in results.question_results:
            finding = self._question_finding(question_result)
            if finding:
                key_findings.append(finding)

        if results.completion_rate < self.settings.low_completion_rate_percent:
            recommendations.append(SHORTEN_SURVEY_RECOMMENDATION)

        nps_score = None
        if results.survey_type == SurveyType.NPS_SURVEY.value:
            nps_score = self.calculate_nps(results)
            if nps_score is not None:
                key_findings.append(f"NPS Score: {nps_score:.1f}")

        summary = (
            f'Survey "{results.title}" received {results.total_responses} responses '
            f"({results.completion_rate:.1f}% completion)."
        )
        if key_findings:
            summary = f"{summary} {key_findings[0]}"

        logger.info(
            f"Generated {len(key_findings)} findings and {len(recommendations)} recommendations "
            f"for survey {results.survey_id}"
        )
        return SurveyInsight(
            summary=summary,
            key_findings=key_findings,
            recommendations=recommendations,
            nps_score=nps_score,
        )

    def _question_finding(self, question_result: QuestionResult) -> Optional[str]:
        summary = question_result.summary

        if isinstance(summary, RatingScaleSummary):
            average = summary.average
            if average <= self.settings.low_satisfaction_threshold:
                return (
                    f'Low satisfaction on "{question_result.question}" '
                    f"(average: {average:.1f}/{summary.scale_max})"
                )
            if average >= self.settings.strong_satisfaction_threshold:
                return (
                    f'Strong satisfaction on "{question_result.question}" '
                    f"(average: {average:.1f}/{summary.scale_max})"
                )
            return None

        if isinstance(summary, MultipleChoiceSummary) and summary.options:
            top_option = summary.options[0]
            if top_option.percentage > self.settings.dominant_preference_percent:
                return (
                    f"Dominant preference: {top_option.option} "
                    f"({top_option.percentage:.1f}% choose this)"
                )
            return None

        if isinstance(summary, OpenTextSummary) and summary.responses:
            return f'Most common feedback: "{summary.responses[0].response}"'

        return None

    def calculate_nps(self, results: SurveyResults) -> Optional[float]:
        """Net Promoter Score from the first rating-scale question.

        Promoters and detractors are read off the rating distribution; the
        denominator is the number of completed responses (0 when there are none).

        Returns:
            NPS in [-100, 100] for consistent data, or None without a rating question
        """
        rating_result = next(
            (
                question_result
                for question_result in results.question_results
                if question_result.question_type == QuestionType.RATING_SCALE.value
            ),
            None,
        )
        if rating_result is None or not isinstance(rating_result.summary, RatingScaleSummary):
            return None

        distribution = rating_result.summary.distribution
        promoters = sum(
            bucket.count for bucket in distribution if bucket.scale >= self.settings.nps_promoter_min_score
        )
        detractors = sum(
            bucket.count for bucket in distribution if bucket.scale <= self.settings.nps_detractor_max_score
        )
        if results.total_responses == 0:
            return 0.0
        return (promoters - detractors) / results.total_responses * 100
