"""Tests for per-question aggregation."""
import json
import uuid

import pytest

from survey_engine.models import SurveyQuestion
from survey_engine.schemas.survey import (
    MatrixConfig,
    MatrixSummary,
    MultipleChoiceConfig,
    MultipleChoiceSummary,
    OpenTextConfig,
    RankingConfig,
    RatingScaleConfig,
    RatingScaleSummary,
)
from survey_engine.services.question_aggregator import (
    build_question_config,
    summarize_question,
)


def _stored(*values):
    return [value if isinstance(value, str) else json.dumps(value) for value in values]


def _question(question_type, **kwargs):
    return SurveyQuestion(
        question_id=uuid.uuid4(),
        survey_id=uuid.uuid4(),
        question="Q",
        question_type=question_type,
        **kwargs,
    )


class TestMultipleChoice:
    def test_counts_and_percentages(self):
        config = MultipleChoiceConfig(options=["A", "B", "C"])

        summary = summarize_question(config, _stored("A", "A", "B", "C"))

        assert [(o.option, o.count, o.percentage) for o in summary.options] == [
            ("A", 2, 50.0),
            ("B", 1, 25.0),
            ("C", 1, 25.0),
        ]

    def test_ties_keep_declared_order_and_unpicked_options_listed(self):
        config = MultipleChoiceConfig(options=["A", "B", "C"])

        summary = summarize_question(config, _stored(["C"], ["B"]))

        assert [o.option for o in summary.options] == ["B", "C", "A"]
        assert summary.options[-1].count == 0
        assert summary.options[-1].percentage == 0.0

    def test_only_first_selection_counts(self):
        config = MultipleChoiceConfig(options=["A", "B"])

        summary = summarize_question(config, _stored(["B", "A"], ["A"]))

        counts = {o.option: o.count for o in summary.options}
        assert counts == {"A": 1, "B": 1}
        assert sum(o.percentage for o in summary.options) == pytest.approx(100.0)

    def test_unknown_option_answers_dilute_percentages(self):
        config = MultipleChoiceConfig(options=["A", "B"])

        summary = summarize_question(config, _stored("A", "Z"))

        assert [(o.option, o.count, o.percentage) for o in summary.options] == [
            ("A", 1, 50.0),
            ("B", 0, 0.0),
        ]

    def test_json_like_option_labels_are_counted(self):
        config = MultipleChoiceConfig(options=["1e1", "null"])

        summary = summarize_question(config, ["1e1", "null", '["null"]'])

        counts = {o.option: o.count for o in summary.options}
        assert counts == {"1e1": 1, "null": 2}

    def test_no_answers_gives_zero_percentages(self):
        summary = summarize_question(MultipleChoiceConfig(options=["A"]), [])
        assert summary.options[0].percentage == 0.0


class TestRatingScale:
    def test_central_tendency(self):
        config = RatingScaleConfig(min_scale=1, max_scale=5)

        summary = summarize_question(config, _stored(5, 5, 4, 2))

        assert summary.average == 4.0
        assert summary.median == 4.5
        assert summary.min == 2
        assert summary.max == 5
        assert [bucket.scale for bucket in summary.distribution] == [1, 2, 3, 4, 5]
        assert {b.scale: b.count for b in summary.distribution} == {1: 0, 2: 1, 3: 0, 4: 1, 5: 2}
        assert summary.distribution[4].percentage == 50.0

    def test_invalid_ratings_are_excluded(self):
        summary = summarize_question(RatingScaleConfig(), _stored("abc", 3, "", 5))

        assert summary.average == 4.0
        assert sum(bucket.count for bucket in summary.distribution) == 2

    def test_empty_ratings_use_configured_bounds(self):
        summary = summarize_question(RatingScaleConfig(min_scale=0, max_scale=10), [])

        assert isinstance(summary, RatingScaleSummary)
        assert summary.average == 0.0
        assert summary.median == 0.0
        assert (summary.min, summary.max) == (0, 10)
        assert summary.distribution == []

    def test_out_of_range_ratings_count_in_average_only(self):
        summary = summarize_question(RatingScaleConfig(min_scale=1, max_scale=5), _stored(5, 9))

        assert summary.average == 7.0
        assert summary.max == 9
        assert sum(bucket.count for bucket in summary.distribution) == 1


def test_open_text_groups_case_insensitively():
    summary = summarize_question(
        OpenTextConfig(), _stored("Great", "great ", "Slow", "", "GREAT")
    )

    assert [(entry.response, entry.count) for entry in summary.responses] == [("great", 3), ("slow", 1)]
    assert summary.total_responses == 4


def test_open_text_keeps_answers_that_look_like_json():
    summary = summarize_question(OpenTextConfig(), ["true", "null", "1e3", "10.50"])

    assert [(entry.response, entry.count) for entry in summary.responses] == [
        ("true", 1),
        ("null", 1),
        ("1e3", 1),
        ("10.50", 1),
    ]
    assert summary.total_responses == 4


class TestRanking:
    def test_average_positions(self):
        config = RankingConfig(items=["X", "Y", "Z"])

        summary = summarize_question(config, _stored(["X", "Y", "Z"], ["X", "Z", "Y"]))

        rankings = [(r.item, r.average_rank, r.total_ranks) for r in summary.item_rankings]
        assert rankings == [("X", 1.0, 2), ("Y", 2.5, 2), ("Z", 2.5, 2)]

    def test_never_ranked_item_sorts_first_with_zero(self):
        config = RankingConfig(items=["X", "Y"])

        summary = summarize_question(config, _stored(["X"]))

        assert summary.item_rankings[0].item == "Y"
        assert summary.item_rankings[0].average_rank == 0.0
        assert summary.item_rankings[0].total_ranks == 0


class TestMatrix:
    def test_cell_averages(self):
        config = MatrixConfig(rows=["Speed", "Price"], columns=["Now", "Later"])

        summary = summarize_question(
            config,
            _stored({"Speed": {"Now": 4, "Later": 2}}, {"Speed": {"Now": 5}}, "garbage"),
        )

        assert isinstance(summary, MatrixSummary)
        speed, price = summary.rows
        assert speed.row == "Speed"
        assert speed.column_averages == {"Now": 4.5, "Later": 2.0}
        assert price.column_averages == {"Now": 0.0, "Later": 0.0}


class TestBuildQuestionConfig:
    def test_unknown_type_has_no_summary(self):
        question = _question("slider")

        config = build_question_config(question)

        assert config is None
        assert summarize_question(config, _stored(1, 2)) is None

    def test_rating_defaults_apply_when_scale_missing(self):
        config = build_question_config(_question("rating_scale"))
        assert (config.min_scale, config.max_scale) == (1, 5)

    def test_rating_scale_zero_is_kept(self):
        config = build_question_config(_question("rating_scale", min_scale=0, max_scale=10))
        assert (config.min_scale, config.max_scale) == (0, 10)

    def test_multiple_choice_options(self):
        config = build_question_config(_question("multiple_choice", options=["A", "B"]))
        assert isinstance(config, MultipleChoiceConfig)
        assert config.options == ["A", "B"]
        assert isinstance(summarize_question(config, []), MultipleChoiceSummary)

    def test_matrix_labels(self):
        config = build_question_config(
            _question("matrix", matrix_rows=["R1"], matrix_columns=["C1", "C2"])
        )
        assert config.rows == ["R1"]
        assert config.columns == ["C1", "C2"]
