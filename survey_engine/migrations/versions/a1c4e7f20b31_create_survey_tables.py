"""create survey tables

Revision ID: a1c4e7f20b31
Revises:
Create Date: 2026-10-18 09:00:00.000000
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from survey_engine.migrations.util import get_json_type, get_timestamp_default, get_uuid_type


# revision identifiers, used by Alembic.
revision: str = 'a1c4e7f20b31'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create surveys, survey_questions, survey_responses and survey_answers."""

    uuid_type = get_uuid_type()
    json_type = get_json_type()
    now_default = get_timestamp_default()

    op.create_table(
        'surveys',
        sa.Column('survey_id', uuid_type, nullable=False),
        sa.Column('creator_id', uuid_type, nullable=True),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('survey_type', sa.String(length=32), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='draft'),
        sa.Column('response_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('completion_rate', sa.Float(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=now_default),
        sa.Column('published_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('closed_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('survey_id'),
    )
    op.create_index('ix_surveys_creator_id', 'surveys', ['creator_id'], unique=False)
    op.create_index('ix_surveys_status', 'surveys', ['status'], unique=False)

    op.create_table(
        'survey_questions',
        sa.Column('question_id', uuid_type, nullable=False),
        sa.Column('survey_id', uuid_type, nullable=False),
        sa.Column('question', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('question_type', sa.String(length=32), nullable=False),
        sa.Column('required', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('order_index', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('options', json_type, nullable=True),
        sa.Column('min_scale', sa.Integer(), nullable=True),
        sa.Column('max_scale', sa.Integer(), nullable=True),
        sa.Column('min_label', sa.String(length=100), nullable=True),
        sa.Column('max_label', sa.String(length=100), nullable=True),
        sa.Column('matrix_rows', json_type, nullable=True),
        sa.Column('matrix_columns', json_type, nullable=True),
        sa.ForeignKeyConstraint(['survey_id'], ['surveys.survey_id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('question_id'),
    )
    op.create_index('ix_survey_questions_survey_id', 'survey_questions', ['survey_id'], unique=False)
    op.create_index(
        'ix_survey_questions_survey_order', 'survey_questions', ['survey_id', 'order_index'], unique=False
    )

    op.create_table(
        'survey_responses',
        sa.Column('response_id', uuid_type, nullable=False),
        sa.Column('survey_id', uuid_type, nullable=False),
        sa.Column('respondent_id', uuid_type, nullable=True),
        sa.Column('lobby_intensity', sa.String(length=32), nullable=True),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=False, server_default=now_default),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['survey_id'], ['surveys.survey_id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('response_id'),
    )
    op.create_index('ix_survey_responses_survey_id', 'survey_responses', ['survey_id'], unique=False)
    op.create_index('ix_survey_responses_respondent_id', 'survey_responses', ['respondent_id'], unique=False)
    op.create_index(
        'ix_survey_responses_survey_completed', 'survey_responses', ['survey_id', 'completed_at'], unique=False
    )

    op.create_table(
        'survey_answers',
        sa.Column('answer_id', uuid_type, nullable=False),
        sa.Column('response_id', uuid_type, nullable=False),
        sa.Column('question_id', uuid_type, nullable=False),
        sa.Column('answer', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=now_default),
        sa.ForeignKeyConstraint(['response_id'], ['survey_responses.response_id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['question_id'], ['survey_questions.question_id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('answer_id'),
    )
    op.create_index('ix_survey_answers_response_id', 'survey_answers', ['response_id'], unique=False)
    op.create_index('ix_survey_answers_question_id', 'survey_answers', ['question_id'], unique=False)


def downgrade() -> None:
    """Drop the survey tables in dependency order."""

    op.drop_index('ix_survey_answers_question_id', table_name='survey_answers')
    op.drop_index('ix_survey_answers_response_id', table_name='survey_answers')
    op.drop_table('survey_answers')

    op.drop_index('ix_survey_responses_survey_completed', table_name='survey_responses')
    op.drop_index('ix_survey_responses_respondent_id', table_name='survey_responses')
    op.drop_index('ix_survey_responses_survey_id', table_name='survey_responses')
    op.drop_table('survey_responses')

    op.drop_index('ix_survey_questions_survey_order', table_name='survey_questions')
    op.drop_index('ix_survey_questions_survey_id', table_name='survey_questions')
    op.drop_table('survey_questions')

    op.drop_index('ix_surveys_status', table_name='surveys')
    op.drop_index('ix_surveys_creator_id', table_name='surveys')
    op.drop_table('surveys')
