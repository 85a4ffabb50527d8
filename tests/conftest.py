"""Pytest configuration and fixtures."""
import os
from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config as AlembicConfig
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

# Ensure the application uses a dedicated SQLite database during tests
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
# Keep SQL echo off
os.environ["ENVIRONMENT"] = "test"

from survey_engine.config import get_settings
from survey_engine.models.base import SurveyType
from survey_engine.schemas.survey import QuestionCreate, SurveyCreate
from tests.helpers import multiple_choice


BASE_DIR = Path(__file__).resolve().parent.parent
TEST_DB_PATH = BASE_DIR / "test.db"
settings = get_settings()


def _remove_test_db():
    if TEST_DB_PATH.exists():
        try:
            TEST_DB_PATH.unlink()
        except PermissionError:
            # On Windows the file may still be held open; the next run retries
            pass


@pytest.fixture(scope="session", autouse=True)
def apply_migrations():
    """Apply database migrations against the test database."""
    _remove_test_db()

    alembic_cfg = AlembicConfig(str(BASE_DIR / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(BASE_DIR / "survey_engine" / "migrations"))
    alembic_cfg.set_main_option("sqlalchemy.url", settings.database_url)
    command.upgrade(alembic_cfg, "head")

    yield

    _remove_test_db()


@pytest.fixture
async def test_engine():
    """Create test database engine using the same database as migrations."""
    engine = create_async_engine(settings.database_url, echo=False, pool_pre_ping=True)

    yield engine

    await engine.dispose()


@pytest.fixture
async def db_session(test_engine):
    """Create test database session."""
    async_session = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session
        await session.rollback()
        await session.close()


@pytest.fixture
async def test_app(test_engine):
    """Create test app with database override."""
    from survey_engine.main import app
    from survey_engine.database import get_db

    async def override_get_db():
        async_session = async_sessionmaker(
            test_engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        async with async_session() as session:
            try:
                yield session
            finally:
                await session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def survey_factory(db_session):
    """Factory for creating draft surveys; returns (survey, ordered questions)."""
    from survey_engine.services import LifecycleService, SurveyRepository

    lifecycle = LifecycleService(db_session)
    repository = SurveyRepository(db_session)

    async def _create_survey(
        questions: list[QuestionCreate] | None = None,
        survey_type: SurveyType = SurveyType.DETAILED_SURVEY,
        title: str = "Launch feedback",
    ):
        survey = await lifecycle.create_survey(
            SurveyCreate(
                title=title,
                survey_type=survey_type,
                questions=questions if questions is not None else [multiple_choice()],
            )
        )
        return survey, await repository.load_questions(survey.survey_id)

    return _create_survey


@pytest.fixture
async def response_factory(db_session):
    """Factory for recording a response: answers map question -> value."""
    from survey_engine.services import LifecycleService

    lifecycle = LifecycleService(db_session)

    async def _record_response(survey, answers: dict, completed: bool = True, lobby_intensity=None):
        response = await lifecycle.start_response(survey.survey_id, lobby_intensity=lobby_intensity)
        for question, value in answers.items():
            await lifecycle.submit_answer(response.response_id, question.question_id, value)
        if completed:
            await lifecycle.complete_response(response.response_id)
        return response

    return _record_response
