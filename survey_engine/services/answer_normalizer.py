"""Decode stored answer payloads into typed values per question type.

Normalization never raises. A value that does not fit its question type is
turned into something the aggregators skip (``None``, an empty list or an
empty mapping), so one bad record cannot abort a whole report.
"""
import json
import math
import re
from typing import Any, Optional

from survey_engine.schemas.survey import (
    MatrixConfig,
    MultipleChoiceConfig,
    OpenTextConfig,
    QuestionConfig,
    RankingConfig,
    RatingScaleConfig,
)


_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def decode_stored_answer(raw: Any) -> Any:
    """Decode JSON arrays and objects; any other stored text is returned verbatim.

    Strings are stored unencoded, so scalar JSON such as ``"true"``, ``"null"``
    or ``"10.50"`` is what the respondent typed and must not be reinterpreted.
    """
    if not isinstance(raw, str):
        return raw
    try:
        value = json.loads(raw)
    except ValueError:
        return raw
    return value if isinstance(value, (list, dict)) else raw


def parse_int(value: Any) -> Optional[int]:
    """Integer parse with leading-integer semantics ("4.5" -> 4, "abc" -> None)."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, str):
        match = _LEADING_INT.match(value)
        return int(match.group(1)) if match else None
    return None


def _label(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


def normalize_choices(value: Any) -> list[Optional[str]]:
    """Ordered option labels for multiple-choice and ranking answers.

    A bare scalar counts as a single choice. Entries that are not labels stay
    in place as ``None`` so later positions keep their rank.
    """
    if value is None:
        return []
    items = value if isinstance(value, list) else [value]
    return [_label(item) for item in items]


def normalize_rating(value: Any) -> Optional[int]:
    return parse_int(value)


def normalize_text(value: Any) -> Optional[str]:
    """Lower-cased, trimmed text; empty or non-text values yield None."""
    text = _label(value)
    if text is None:
        return None
    text = text.lower().strip()
    return text or None


def normalize_matrix(value: Any, rows: list[str], columns: list[str]) -> dict[str, dict[str, int]]:
    """Row -> column -> score for declared labels only; unparseable scores are dropped."""
    if not isinstance(value, dict):
        return {}

    known_rows = set(rows)
    known_columns = set(columns)
    scores: dict[str, dict[str, int]] = {}
    for row, column_scores in value.items():
        if row not in known_rows or not isinstance(column_scores, dict):
            continue
        for column, score in column_scores.items():
            if column not in known_columns:
                continue
            parsed = parse_int(score)
            if parsed is not None:
                scores.setdefault(row, {})[column] = parsed
    return scores


def normalize_answer(config: QuestionConfig, raw: Any) -> Any:
    """Decode one stored answer and shape it for the question's aggregator."""
    if isinstance(config, OpenTextConfig):
        # free text is never JSON-decoded
        return normalize_text(raw)

    value = decode_stored_answer(raw)
    if isinstance(config, (MultipleChoiceConfig, RankingConfig)):
        return normalize_choices(value)
    if isinstance(config, RatingScaleConfig):
        return normalize_rating(value)
    if isinstance(config, MatrixConfig):
        return normalize_matrix(value, config.rows, config.columns)
    raise TypeError(f"Unsupported question configuration: {type(config).__name__}")
