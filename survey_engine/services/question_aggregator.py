"""Per-question aggregation.

One pure function per question type turns normalized answers into a summary.
``summarize_question`` decodes stored answers and dispatches on the question
configuration variant.
"""
import logging
from collections import Counter
from statistics import fmean, median
from typing import Any, Optional

from survey_engine.models.base import QuestionType
from survey_engine.models.survey_question import SurveyQuestion
from survey_engine.schemas.survey import (
    ItemRanking,
    MatrixConfig,
    MatrixRow,
    MatrixSummary,
    MultipleChoiceConfig,
    MultipleChoiceSummary,
    OpenTextConfig,
    OpenTextSummary,
    OptionCount,
    QuestionConfig,
    QuestionSummary,
    RankingConfig,
    RankingSummary,
    RatingScaleConfig,
    RatingScaleSummary,
    ScaleBucket,
    TextCount,
)
from survey_engine.services.answer_normalizer import normalize_answer

logger = logging.getLogger(__name__)

DEFAULT_MIN_SCALE = 1
DEFAULT_MAX_SCALE = 5


def _percentage(count: int, total: int) -> float:
    return (count / total * 100) if total > 0 else 0.0


def _labels(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item is not None]


def build_question_config(question: SurveyQuestion) -> Optional[QuestionConfig]:
    """Map a stored question onto its configuration variant.

    Returns None for a question type outside the supported set.
    """
    try:
        question_type = QuestionType(question.question_type)
    except ValueError:
        logger.warning(
            f"Question {question.question_id} has unsupported type {question.question_type!r}; no summary"
        )
        return None

    if question_type is QuestionType.MULTIPLE_CHOICE:
        return MultipleChoiceConfig(options=_labels(question.options))
    if question_type is QuestionType.RATING_SCALE:
        return RatingScaleConfig(
            min_scale=question.min_scale if question.min_scale is not None else DEFAULT_MIN_SCALE,
            max_scale=question.max_scale if question.max_scale is not None else DEFAULT_MAX_SCALE,
            min_label=question.min_label,
            max_label=question.max_label,
        )
    if question_type is QuestionType.OPEN_TEXT:
        return OpenTextConfig()
    if question_type is QuestionType.RANKING:
        return RankingConfig(items=_labels(question.options))
    return MatrixConfig(rows=_labels(question.matrix_rows), columns=_labels(question.matrix_columns))


def summarize_multiple_choice(
    config: MultipleChoiceConfig, answers: list[list[Optional[str]]]
) -> MultipleChoiceSummary:
    """Count the first selection of each answer against the declared options.

    Percentages are taken over every answer to the question, so answers naming
    an undeclared option dilute the shares without being listed.
    """
    counts = {option: 0 for option in config.options}
    for choices in answers:
        if choices and choices[0] in counts:
            counts[choices[0]] += 1

    total = len(answers)
    options = [
        OptionCount(option=option, count=count, percentage=_percentage(count, total))
        for option, count in counts.items()
    ]
    # sort is stable, so equal counts keep the declared order
    options.sort(key=lambda row: row.count, reverse=True)
    return MultipleChoiceSummary(options=options)


def summarize_rating_scale(
    config: RatingScaleConfig, ratings: list[Optional[int]]
) -> RatingScaleSummary:
    valid = sorted(rating for rating in ratings if rating is not None)
    if not valid:
        return RatingScaleSummary(
            average=0.0,
            median=0.0,
            min=config.min_scale,
            max=config.max_scale,
            scale_min=config.min_scale,
            scale_max=config.max_scale,
            distribution=[],
        )

    counts = Counter(valid)
    distribution = [
        ScaleBucket(scale=scale, count=counts[scale], percentage=_percentage(counts[scale], len(valid)))
        for scale in range(config.min_scale, config.max_scale + 1)
    ]
    return RatingScaleSummary(
        average=round(fmean(valid), 2),
        median=median(valid),
        min=valid[0],
        max=valid[-1],
        scale_min=config.min_scale,
        scale_max=config.max_scale,
        distribution=distribution,
    )


def summarize_open_text(config: OpenTextConfig, texts: list[Optional[str]]) -> OpenTextSummary:
    counts = Counter(text for text in texts if text)
    # most_common keeps first-seen order among equal counts
    responses = [TextCount(response=text, count=count) for text, count in counts.most_common()]
    return OpenTextSummary(responses=responses, total_responses=sum(counts.values()))


def summarize_ranking(config: RankingConfig, rankings: list[list[Optional[str]]]) -> RankingSummary:
    """Average 1-based position per declared item.

    Items nobody ranked average 0 and therefore sort ahead of ranked items.
    """
    positions: dict[str, list[int]] = {item: [] for item in config.items}
    for ranking in rankings:
        for position, item in enumerate(ranking, start=1):
            if item in positions:
                positions[item].append(position)

    item_rankings = [
        ItemRanking(item=item, average_rank=fmean(ranks) if ranks else 0.0, total_ranks=len(ranks))
        for item, ranks in positions.items()
    ]
    item_rankings.sort(key=lambda ranking: ranking.average_rank)
    return RankingSummary(item_rankings=item_rankings)


def summarize_matrix(config: MatrixConfig, answers: list[dict[str, dict[str, int]]]) -> MatrixSummary:
    cells: dict[str, dict[str, list[int]]] = {
        row: {column: [] for column in config.columns} for row in config.rows
    }
    for answer in answers:
        for row, column_scores in answer.items():
            for column, score in column_scores.items():
                cells[row][column].append(score)

    rows = [
        MatrixRow(
            row=row,
            column_averages={
                column: round(fmean(scores), 2) if scores else 0.0
                for column, scores in columns.items()
            },
        )
        for row, columns in cells.items()
    ]
    return MatrixSummary(rows=rows)


def summarize_question(config: Optional[QuestionConfig], stored_answers: list[str]) -> Optional[QuestionSummary]:
    """Normalize the stored answers of one question and aggregate them.

    Args:
        config: Question configuration variant, or None for an unsupported type
        stored_answers: Serialized answer payloads, one per answer row

    Returns:
        The type-specific summary, or None when there is nothing to show
    """
    if config is None:
        return None

    values = [normalize_answer(config, raw) for raw in stored_answers]
    if isinstance(config, MultipleChoiceConfig):
        return summarize_multiple_choice(config, values)
    if isinstance(config, RatingScaleConfig):
        return summarize_rating_scale(config, values)
    if isinstance(config, OpenTextConfig):
        return summarize_open_text(config, values)
    if isinstance(config, RankingConfig):
        return summarize_ranking(config, values)
    return summarize_matrix(config, values)
