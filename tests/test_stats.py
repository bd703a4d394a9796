"""
Unit tests for the statistics aggregator.

These call the pure functions in services.stats_service directly with mock
readings and a fixed reference time, so no store or HTTP layer is involved.
"""

import pytest
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from test_fixtures import make_reading, readings_at
from domain.enums import MealType, Trend, RangeStatus
from domain.schemas.stats_schemas import MealAverage
from services import stats_service
from services.stats_service import (
    classify,
    in_range_percentage,
    compute_trend,
    compute_stats,
    compute_insights,
    meal_averages,
    meal_trends,
    best_meal,
)

NOW = datetime(2024, 5, 15, 18, 0, tzinfo=timezone.utc)


# =============================================================================
# RANGE CLASSIFICATION
# =============================================================================


@pytest.mark.parametrize(
    "value,expected",
    [
        (69.9, RangeStatus.LOW),
        (70, RangeStatus.NORMAL),
        (140, RangeStatus.NORMAL),
        (140.1, RangeStatus.HIGH),
    ],
)
def test_classify_bounds_are_inclusive(value, expected):
    assert classify(value) == expected


def test_in_range_percentage():
    readings = [make_reading(blood_sugar=v) for v in (70, 140, 141, 65)]
    assert in_range_percentage(readings) == 50.0


def test_in_range_percentage_empty_is_zero():
    assert in_range_percentage([]) == 0.0


# =============================================================================
# TREND
# =============================================================================


def test_trend_rising():
    # oldest first: older window 100,100,100 then recent 110,110,110
    readings = readings_at(NOW - timedelta(hours=6), [100, 100, 100, 110, 110, 110])
    assert compute_trend(readings) == Trend.RISING


def test_trend_falling():
    readings = readings_at(NOW - timedelta(hours=6), [130, 130, 130, 120, 120, 120])
    assert compute_trend(readings) == Trend.FALLING


def test_trend_steady_within_threshold():
    readings = readings_at(NOW - timedelta(hours=6), [100, 100, 100, 105, 105, 105])
    assert compute_trend(readings) == Trend.STEADY


def test_trend_with_too_few_readings():
    assert compute_trend([]) == Trend.STEADY
    assert compute_trend([make_reading(blood_sugar=200)]) == Trend.STEADY
    # three readings leave nothing to compare against
    assert compute_trend(readings_at(NOW, [90, 150, 200])) == Trend.STEADY


def test_trend_uses_partial_older_window():
    # recent window: 150,150,150; older window: only 100
    readings = readings_at(NOW - timedelta(hours=4), [100, 150, 150, 150])
    assert compute_trend(readings) == Trend.RISING


def test_trend_ignores_input_order():
    readings = readings_at(NOW - timedelta(hours=6), [100, 100, 100, 110, 110, 110])
    assert compute_trend(list(reversed(readings))) == Trend.RISING


# =============================================================================
# HEADLINE STATS
# =============================================================================


def test_stats_empty():
    stats = compute_stats([], now=NOW)
    assert stats.last_reading is None
    assert stats.avg_today is None
    assert stats.avg_yesterday is None
    assert stats.delta_from_yesterday is None
    assert stats.total_readings == 0
    assert stats.in_range_percentage == 0
    assert stats.trend == Trend.STEADY


def test_stats_today_and_yesterday():
    readings = [
        make_reading(blood_sugar=100, timestamp=NOW - timedelta(hours=2)),
        make_reading(blood_sugar=120, timestamp=NOW - timedelta(hours=1)),
        make_reading(blood_sugar=150, timestamp=NOW - timedelta(days=1)),
    ]
    stats = compute_stats(readings, now=NOW)
    assert stats.last_reading == 120
    assert stats.avg_today == 110
    assert stats.avg_yesterday == 150
    assert stats.delta_from_yesterday == -40
    assert stats.total_readings == 3
    assert stats.in_range_count == 2


def test_stats_day_without_readings_is_none_not_nan():
    readings = [make_reading(blood_sugar=100, timestamp=NOW - timedelta(days=3))]
    stats = compute_stats(readings, now=NOW)
    assert stats.avg_today is None
    assert stats.avg_yesterday is None
    assert stats.delta_from_yesterday is None
    assert stats.last_reading == 100


def test_stats_day_boundary_follows_timezone():
    # 02:00 UTC on May 15 is still May 14 in New York
    tz = ZoneInfo("America/New_York")
    reading = make_reading(
        blood_sugar=95, timestamp=datetime(2024, 5, 15, 2, 0, tzinfo=timezone.utc)
    )
    stats = compute_stats([reading], now=NOW, tz=tz)
    assert stats.avg_today is None
    assert stats.avg_yesterday == 95


def test_stats_trend_only_considers_last_seven_days():
    old = readings_at(NOW - timedelta(days=20), [200, 200, 200])
    recent = readings_at(NOW - timedelta(hours=3), [100, 100, 100])
    stats = compute_stats(old + recent, now=NOW)
    assert stats.readings_last_7_days == 3
    assert stats.trend == Trend.STEADY


def test_stats_accepts_naive_now():
    readings = [make_reading(blood_sugar=100, timestamp=NOW - timedelta(hours=1))]
    stats = compute_stats(readings, now=NOW.replace(tzinfo=None))
    assert stats.avg_today == 100


# =============================================================================
# INSIGHTS
# =============================================================================


def test_meal_trends_cover_every_meal_type():
    readings = [
        make_reading(blood_sugar=100, meal_type=MealType.BREAKFAST),
        make_reading(blood_sugar=140, meal_type=MealType.BREAKFAST),
    ]
    trends = {t.meal: t for t in meal_trends(readings)}
    assert set(trends) == set(MealType)
    assert trends[MealType.BREAKFAST].average == 120
    assert trends[MealType.BREAKFAST].lowest == 100
    assert trends[MealType.BREAKFAST].highest == 140
    assert trends[MealType.DINNER].count == 0
    assert trends[MealType.DINNER].average is None


def test_meal_averages_accepts_string_meal_types():
    readings = [
        make_reading(blood_sugar=90, meal_type="lunch"),
        make_reading(blood_sugar=110, meal_type=MealType.LUNCH),
    ]
    averages = meal_averages(readings)
    assert len(averages) == 1
    assert averages[0].meal == MealType.LUNCH
    assert averages[0].average == 100
    assert averages[0].count == 2


def test_best_meal_prefers_highest_in_range_average():
    averages = [
        MealAverage(meal=MealType.DINNER, average=160, count=2),
        MealAverage(meal=MealType.BREAKFAST, average=95, count=3),
        MealAverage(meal=MealType.LUNCH, average=130, count=1),
    ]
    assert best_meal(averages).meal == MealType.LUNCH


def test_best_meal_without_in_range_keeps_first():
    averages = [
        MealAverage(meal=MealType.DINNER, average=160, count=2),
        MealAverage(meal=MealType.SNACK, average=180, count=1),
    ]
    assert best_meal(averages).meal == MealType.DINNER
    assert best_meal([]) is None


def test_insights_distribution_and_recommendations():
    readings = [
        make_reading(blood_sugar=60, timestamp=NOW - timedelta(hours=5)),
        make_reading(blood_sugar=100, timestamp=NOW - timedelta(hours=4)),
        make_reading(blood_sugar=180, timestamp=NOW - timedelta(hours=3)),
        make_reading(blood_sugar=190, timestamp=NOW - timedelta(hours=2)),
    ]
    insights = compute_insights(readings, now=NOW)
    assert insights.total_readings == 4
    assert insights.readings_last_7_days == 4
    assert insights.seven_day_average == 132.5
    assert insights.distribution.low_count == 1
    assert insights.distribution.normal_count == 1
    assert insights.distribution.high_count == 2
    assert insights.in_range_percentage == 25.0
    tips = insights.recommendations
    assert any("quick-acting carbs" in t for t in tips)
    assert not any("Great job" in t for t in tips)
    assert tips[-1] == "Aim for 70-140 mg/dL for optimal gestational diabetes management"


def test_insights_high_average_and_great_job():
    high = [make_reading(blood_sugar=170, timestamp=NOW - timedelta(hours=h)) for h in (1, 2)]
    tips = compute_insights(high, now=NOW).recommendations
    assert tips[0].startswith("Consider reducing carbohydrate intake")

    steady = [make_reading(blood_sugar=100, timestamp=NOW - timedelta(hours=h)) for h in (1, 2)]
    tips = compute_insights(steady, now=NOW).recommendations
    assert "Great job! Keep up your current routine" in tips


def test_insights_empty():
    insights = compute_insights([], now=NOW)
    assert insights.total_readings == 0
    assert insights.seven_day_average is None
    assert insights.best_meal is None
    assert insights.trend == Trend.STEADY
    assert len(insights.recommendations) == 1


def test_custom_target_band():
    readings = [make_reading(blood_sugar=v) for v in (62, 95)]
    assert stats_service.in_range_percentage(readings, low=60, high=90) == 50.0
