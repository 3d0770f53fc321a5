"""
Unit Tests for Metric Primitives

Tests the shared helpers every extractor builds on:
- Rounding, clamping and safe percentages
- Distributions with declared category order
- First-in-order tie-breaks
- Lenient timestamp parsing
"""

from datetime import date, datetime

import pytest

from backend.persona.metric_primitives import (
    argmax_label,
    clamp,
    clamped_weighted_score,
    distribution_of,
    is_number,
    label_for_score,
    mean,
    numeric_values,
    parse_timestamp,
    percentage,
    round_half_up,
)
from tests.conftest import assert_percentages_sum_to_100


class TestArithmetic:
    """Test rounding and guarded arithmetic"""

    def test_round_half_up(self):
        """Test halves round up, including negatives"""
        assert round_half_up(2.5) == 3
        assert round_half_up(8.625) == 9
        assert round_half_up(2.49) == 2
        assert round_half_up(-2.5) == -2

    def test_clamp(self):
        """Test values are clamped to [0, 100] by default"""
        assert clamp(-5) == 0.0
        assert clamp(150) == 100.0
        assert clamp(42.5) == 42.5

    def test_percentage_of_zero_whole(self):
        """Test percentage guards against division by zero"""
        assert percentage(3, 0) == 0.0
        assert percentage(1, 4) == 25.0

    def test_mean_of_empty_is_none(self):
        """Test mean returns None for no values"""
        assert mean([]) is None
        assert mean([1, 2, 3]) == 2.0

    def test_is_number_rejects_bool_and_nan(self):
        """Test bools, NaN and strings are not numbers"""
        assert is_number(3)
        assert is_number(4.5)
        assert not is_number(True)
        assert not is_number(float('nan'))
        assert not is_number('4.5')
        assert not is_number(None)

    def test_numeric_values_skips_missing(self):
        """Test numeric_values only keeps records reporting the field"""
        records = [{'depth': 10}, {'depth': None}, {}, {'depth': 'deep'}, {'depth': 30}]
        assert numeric_values(records, 'depth') == [10.0, 30.0]


class TestDistribution:
    """Test grouped counts and percentages"""

    def test_empty_input_gives_empty_distribution(self):
        """Test empty input yields {}"""
        assert distribution_of([], lambda r: r, categories=['a', 'b']) == {}

    def test_declared_categories_keep_order_and_zeros(self):
        """Test declared categories appear in order with zero counts"""
        distribution = distribution_of(['b', 'b', 'a'], lambda r: r, categories=['c', 'a', 'b'])

        assert list(distribution) == ['c', 'a', 'b']
        assert distribution['c'].count == 0
        assert distribution['b'].count == 2
        assert distribution['b'].percentage == pytest.approx(200 / 3)
        assert_percentages_sum_to_100(distribution)

    def test_weighted_distribution(self):
        """Test weights replace counts when given"""
        records = [('x', 1.0), ('y', 3.0)]
        distribution = distribution_of(records, lambda r: r[0], weight=lambda r: r[1])

        assert distribution['y'].count == 3.0
        assert distribution['y'].percentage == 75.0

    def test_none_label_is_skipped(self):
        """Test records classified as None are not counted"""
        distribution = distribution_of([1, 2, 3], lambda r: 'odd' if r % 2 else None)
        assert distribution['odd'].count == 2
        assert distribution['odd'].percentage == 100.0


class TestLabels:
    """Test argmax tie-breaks and threshold tables"""

    def test_argmax_tie_goes_to_first(self):
        """Test ties resolve to the first key in order"""
        assert argmax_label({'Monday': 2, 'Tuesday': 2, 'Sunday': 1}) == 'Monday'

    def test_argmax_of_empty(self):
        """Test empty mapping has no label"""
        assert argmax_label({}) is None

    def test_threshold_is_strictly_exceeded(self):
        """Test a score equal to a bound falls through to the next label"""
        thresholds = [(70, 'High'), (40, 'Moderate')]
        assert label_for_score(71, thresholds, 'Low') == 'High'
        assert label_for_score(70, thresholds, 'Low') == 'Moderate'
        assert label_for_score(40, thresholds, 'Low') == 'Low'

    def test_weighted_score_is_clamped(self):
        """Test weighted blends are clamped and rounded for display"""
        score = clamped_weighted_score([(100, 1.0), (50, 0.5)])
        assert score.raw == 100.0
        assert score.display == 100

        score = clamped_weighted_score([(100, 1.0), (10, -20.0)])
        assert score.raw == 0.0

        score = clamped_weighted_score([(33.25, 1.0)])
        assert score.display == 33


class TestParseTimestamp:
    """Test lenient timestamp parsing"""

    def test_naive_string_is_utc(self):
        """Test naive ISO strings are taken as UTC"""
        ts = parse_timestamp('2024-01-01T09:00')
        assert ts.hour == 9
        assert str(ts.tzinfo) == 'UTC'

    def test_offset_string_is_converted(self):
        """Test offset timestamps are normalized to UTC"""
        ts = parse_timestamp('2024-01-01T09:00:00+02:00')
        assert ts.hour == 7

    def test_date_and_datetime_objects(self):
        """Test date and datetime objects are accepted"""
        assert parse_timestamp(date(2024, 1, 10)).day == 10
        assert parse_timestamp(datetime(2024, 1, 10, 15, 30)).hour == 15

    @pytest.mark.parametrize('value', [None, '', '   ', 'not a date', '2024-13-45', 12345, {}])
    def test_malformed_values_return_none(self, value):
        """Test unparseable values return None instead of raising"""
        assert parse_timestamp(value) is None
