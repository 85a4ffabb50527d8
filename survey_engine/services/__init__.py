from survey_engine.services.survey_repository import SurveyRepository
from survey_engine.services.results_service import ResultsService, calculate_completion_rate
from survey_engine.services.insight_service import InsightService
from survey_engine.services.export_service import ExportService, ExportFormat
from survey_engine.services.lifecycle_service import LifecycleService

__all__ = [
    "SurveyRepository",
    "ResultsService",
    "calculate_completion_rate",
    "InsightService",
    "ExportService",
    "ExportFormat",
    "LifecycleService",
]
