"""Database models."""
from survey_engine.models.survey import Survey
from survey_engine.models.survey_question import SurveyQuestion
from survey_engine.models.survey_response import SurveyResponse, SurveyAnswer

__all__ = [
    "Survey",
    "SurveyQuestion",
    "SurveyResponse",
    "SurveyAnswer",
]
