"""Survey results export as JSON documents and CSV text."""
import csv
import io
import json
import logging
from enum import Enum
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from survey_engine.config import get_settings
from survey_engine.schemas.survey import (
    MatrixSummary,
    MultipleChoiceSummary,
    OpenTextSummary,
    QuestionSummary,
    RankingSummary,
    RatingScaleSummary,
    SurveyExport,
    SurveyResults,
)
from survey_engine.services.results_service import ResultsService

logger = logging.getLogger(__name__)

CSV_COLUMNS = ["Question", "Type", "Response Count", "Details"]


class ExportFormat(str, Enum):
    JSON = "json"
    CSV = "csv"


MEDIA_TYPES = {
    ExportFormat.JSON: "application/json",
    ExportFormat.CSV: "text/csv",
}


def format_summary_details(summary: Optional[QuestionSummary]) -> str:
    """Render a question summary as a single semicolon-joined string."""
    if summary is None:
        return ""

    if isinstance(summary, MultipleChoiceSummary):
        return "; ".join(
            f"{option.option}: {option.count} ({option.percentage:.1f}%)" for option in summary.options
        )
    if isinstance(summary, RatingScaleSummary):
        return f"Average: {summary.average}, Median: {summary.median}, Range: {summary.min}-{summary.max}"
    if isinstance(summary, OpenTextSummary):
        return "; ".join(f"{entry.response} ({entry.count})" for entry in summary.responses)
    if isinstance(summary, RankingSummary):
        return "; ".join(f"{ranking.item}: {ranking.average_rank:.2f}" for ranking in summary.item_rankings)
    if isinstance(summary, MatrixSummary):
        return "; ".join(
            f"{row.row}: {json.dumps(row.column_averages, separators=(',', ':'))}" for row in summary.rows
        )
    return ""


def encode_json(results: SurveyResults) -> str:
    document = {
        "survey": {
            "id": str(results.survey_id),
            "title": results.title,
            "description": results.description,
            "survey_type": results.survey_type,
            "status": results.status,
            "total_responses": results.total_responses,
            "completion_rate": results.completion_rate,
        },
        "results": [
            question_result.model_dump(mode="json") for question_result in results.question_results
        ],
    }
    return json.dumps(document)


def encode_csv(results: SurveyResults) -> str:
    """One row per question; text fields are quoted, the response count is not."""
    output = io.StringIO()
    csv.writer(output, lineterminator="\n").writerow(CSV_COLUMNS)

    writer = csv.writer(output, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
    for question_result in results.question_results:
        writer.writerow(
            [
                question_result.question,
                question_result.question_type,
                question_result.response_count,
                format_summary_details(question_result.summary),
            ]
        )
    return output.getvalue()


class ExportService:
    """Service for serializing compiled survey results into downloadable files."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.settings = get_settings()
        self.results_service = ResultsService(db)

    async def export_results(
        self,
        survey_id: UUID,
        export_format: ExportFormat,
        lobby_intensity: Optional[str] = None,
    ) -> SurveyExport:
        """
        Compile results and encode them in the requested format.

        Args:
            survey_id: Survey UUID
            export_format: ExportFormat.JSON or ExportFormat.CSV
            lobby_intensity: Only include responses tagged with this intensity

        Returns:
            SurveyExport with content, filename and media type

        Raises:
            SurveyNotFoundError: If the survey does not exist
        """
        export_format = ExportFormat(export_format)
        results = await self.results_service.compile_results(survey_id, lobby_intensity)

        if export_format is ExportFormat.JSON:
            content = encode_json(results)
        else:
            content = encode_csv(results)

        logger.info(f"Exported survey {survey_id} as {export_format.value} ({len(content)} chars)")
        return SurveyExport(
            content=content,
            filename=f"{self.settings.export_filename_stem}.{export_format.value}",
            media_type=MEDIA_TYPES[export_format],
        )
