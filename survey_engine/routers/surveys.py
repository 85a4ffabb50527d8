"""Router exposing survey lifecycle, results, insights and exports."""
from __future__ import annotations

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from survey_engine.database import get_db
from survey_engine.models.base import LobbyIntensity
from survey_engine.schemas.survey import (
    AnswerSubmission,
    CompletionResponse,
    QuestionRecord,
    ResponseRecord,
    ResponseStart,
    ResponseSubmission,
    SurveyCreate,
    SurveyDetail,
    SurveyInsight,
    SurveyRecord,
    SurveyResults,
)
from survey_engine.services import (
    ExportFormat,
    ExportService,
    InsightService,
    LifecycleService,
    ResultsService,
    SurveyRepository,
)
from survey_engine.utils.exceptions import (
    InvalidStateTransitionError,
    MissingRequiredAnswerError,
    QuestionNotFoundError,
    ResponseNotFoundError,
    SurveyNotFoundError,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/surveys")


def _intensity(lobby_intensity: Optional[LobbyIntensity]) -> Optional[str]:
    return lobby_intensity.value if lobby_intensity else None


@router.post("", response_model=SurveyDetail, status_code=status.HTTP_201_CREATED)
async def create_survey(
    payload: SurveyCreate,
    db: AsyncSession = Depends(get_db),
) -> SurveyDetail:
    """Create a draft survey with its questions."""
    survey = await LifecycleService(db).create_survey(payload)
    questions = await SurveyRepository(db).load_questions(survey.survey_id)
    return SurveyDetail(
        **SurveyRecord.model_validate(survey).model_dump(),
        questions=[QuestionRecord.model_validate(question) for question in questions],
    )


@router.post("/{survey_id}/publish", response_model=SurveyRecord)
async def publish_survey(survey_id: UUID, db: AsyncSession = Depends(get_db)) -> SurveyRecord:
    """Publish a draft survey."""
    try:
        survey = await LifecycleService(db).publish_survey(survey_id)
    except SurveyNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="survey_not_found")
    except InvalidStateTransitionError as e:
        logger.info(f"Rejected publish: {e}")
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="invalid_state_transition")
    return SurveyRecord.model_validate(survey)


@router.post("/{survey_id}/close", response_model=SurveyRecord)
async def close_survey(survey_id: UUID, db: AsyncSession = Depends(get_db)) -> SurveyRecord:
    """Close a survey."""
    try:
        survey = await LifecycleService(db).close_survey(survey_id)
    except SurveyNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="survey_not_found")
    return SurveyRecord.model_validate(survey)


@router.post("/{survey_id}/responses", response_model=ResponseRecord, status_code=status.HTTP_201_CREATED)
async def submit_response(
    survey_id: UUID,
    submission: ResponseSubmission,
    db: AsyncSession = Depends(get_db),
) -> ResponseRecord:
    """Store a complete response in one request."""
    try:
        response = await LifecycleService(db).submit_response(
            survey_id,
            submission.answers,
            respondent_id=submission.respondent_id,
            lobby_intensity=submission.lobby_intensity,
        )
    except SurveyNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="survey_not_found")
    except QuestionNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="question_not_found")
    except MissingRequiredAnswerError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "missing_required_answers", "question_ids": [str(q) for q in e.question_ids]},
        )
    return ResponseRecord.model_validate(response)


@router.post("/{survey_id}/responses/start", response_model=ResponseRecord, status_code=status.HTTP_201_CREATED)
async def start_response(
    survey_id: UUID,
    payload: ResponseStart,
    db: AsyncSession = Depends(get_db),
) -> ResponseRecord:
    """Open an in-progress response."""
    try:
        response = await LifecycleService(db).start_response(
            survey_id,
            respondent_id=payload.respondent_id,
            lobby_intensity=payload.lobby_intensity,
        )
    except SurveyNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="survey_not_found")
    return ResponseRecord.model_validate(response)


@router.post("/responses/{response_id}/answers", status_code=status.HTTP_204_NO_CONTENT)
async def submit_answer(
    response_id: UUID,
    payload: AnswerSubmission,
    db: AsyncSession = Depends(get_db),
) -> Response:
    """Record one answer on an in-progress response."""
    try:
        await LifecycleService(db).submit_answer(response_id, payload.question_id, payload.value)
    except ResponseNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="response_not_found")
    except QuestionNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="question_not_found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/responses/{response_id}/complete", response_model=CompletionResponse)
async def complete_response(response_id: UUID, db: AsyncSession = Depends(get_db)) -> CompletionResponse:
    """Mark a response completed and return the survey's new completion rate."""
    try:
        completion_rate = await LifecycleService(db).complete_response(response_id)
    except ResponseNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="response_not_found")
    return CompletionResponse(response_id=response_id, completion_rate=completion_rate)


@router.get("/{survey_id}/results", response_model=SurveyResults)
async def get_results(
    survey_id: UUID,
    lobby_intensity: Optional[LobbyIntensity] = None,
    db: AsyncSession = Depends(get_db),
) -> SurveyResults:
    """Return compiled per-question results."""
    try:
        return await ResultsService(db).compile_results(survey_id, _intensity(lobby_intensity))
    except SurveyNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="survey_not_found")


@router.get("/{survey_id}/results/export")
async def export_results(
    survey_id: UUID,
    export_format: ExportFormat = Query(ExportFormat.JSON, alias="format"),
    lobby_intensity: Optional[LobbyIntensity] = None,
    db: AsyncSession = Depends(get_db),
) -> Response:
    """Download compiled results as a JSON document or CSV file."""
    try:
        export = await ExportService(db).export_results(
            survey_id, export_format, _intensity(lobby_intensity)
        )
    except SurveyNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="survey_not_found")
    return Response(
        content=export.content,
        media_type=export.media_type,
        headers={"Content-Disposition": f'attachment; filename="{export.filename}"'},
    )


@router.get("/{survey_id}/insights", response_model=SurveyInsight)
async def get_insights(
    survey_id: UUID,
    lobby_intensity: Optional[LobbyIntensity] = None,
    db: AsyncSession = Depends(get_db),
) -> SurveyInsight:
    """Return the rule-based insight summary."""
    try:
        return await InsightService(db).generate_insights(survey_id, _intensity(lobby_intensity))
    except SurveyNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="survey_not_found")
