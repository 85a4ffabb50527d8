"""Utility functions for Alembic migrations."""
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql
from alembic import op


def _dialect_name() -> str:
    bind = op.get_bind()
    return bind.dialect.name if bind else 'postgresql'


def get_uuid_type():
    """UUID column type for the current dialect.

    PostgreSQL gets a native UUID; SQLite and others get String(36), matching
    the hex values written by ``survey_engine.models.base.AdaptiveUUID``.
    """
    if _dialect_name() == 'postgresql':
        return postgresql.UUID(as_uuid=True)
    return sa.String(length=36)


def get_json_type():
    """JSONB on PostgreSQL, generic JSON elsewhere."""
    if _dialect_name() == 'postgresql':
        return postgresql.JSONB(astext_type=sa.Text())
    return sa.JSON()


def get_timestamp_default():
    """Server default for created/started timestamps (NOW() or CURRENT_TIMESTAMP)."""
    if _dialect_name() == 'postgresql':
        return sa.text("timezone('utc', now())")
    return sa.text('CURRENT_TIMESTAMP')
