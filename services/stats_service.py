"""
Statistics aggregation over readings.

Everything here is pure and synchronous: callers pass the readings (any
objects with blood_sugar, meal_type and timestamp attributes) and the
reference time, and get schema objects back. No storage access, no I/O.
"""

from datetime import datetime, timedelta, timezone, tzinfo
from statistics import fmean
from typing import Iterable, List, Optional, Sequence
import logging

from domain.enums import MealType, Trend, RangeStatus
from domain.schemas.stats_schemas import (
    ReadingStats,
    MealTrend,
    MealAverage,
    ReadingDistribution,
    InsightsResponse,
)

logger = logging.getLogger("ander.stats")

TARGET_LOW = 70.0
TARGET_HIGH = 140.0
TREND_WINDOW = 3
TREND_THRESHOLD = 5.0
RECENT_DAYS = 7


def _value(reading) -> float:
    return float(reading.blood_sugar)


def _meal(reading) -> MealType:
    return MealType(getattr(reading.meal_type, "value", reading.meal_type))


def _local(ts: datetime, tz: tzinfo) -> datetime:
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(tz)


def _mean(values: Sequence[float]) -> Optional[float]:
    """Mean that is None, never NaN, for an empty sequence"""
    return fmean(values) if values else None


def newest_first(readings: Iterable) -> List:
    return sorted(readings, key=lambda r: r.timestamp, reverse=True)


def classify(value: float, low: float = TARGET_LOW, high: float = TARGET_HIGH) -> RangeStatus:
    """Place a value relative to the target band; both bounds are in range"""
    if value < low:
        return RangeStatus.LOW
    if value > high:
        return RangeStatus.HIGH
    return RangeStatus.NORMAL


def in_range_percentage(
    readings: Sequence, low: float = TARGET_LOW, high: float = TARGET_HIGH
) -> float:
    """Share of readings with low <= value <= high, as 0-100; 0 for no readings"""
    if not readings:
        return 0.0
    in_range = sum(1 for r in readings if low <= _value(r) <= high)
    return in_range / len(readings) * 100


def readings_since(readings: Iterable, since: datetime) -> List:
    return [r for r in readings if _local(r.timestamp, timezone.utc) >= since]


def readings_on_day(readings: Iterable, day, tz: tzinfo) -> List:
    return [r for r in readings if _local(r.timestamp, tz).date() == day]


def compute_trend(readings: Sequence) -> Trend:
    """
    Compare the mean of the three most recent readings with the mean of the
    three before them.

    Args:
        readings: readings in any order; they are sorted newest first here

    Returns:
        Trend.RISING if the recent mean exceeds the older one by more than
        5 mg/dL, Trend.FALLING if it is more than 5 below, else Trend.STEADY.
        STEADY as well when fewer than 2 readings (or no older ones) exist.
    """
    if len(readings) < 2:
        return Trend.STEADY
    ordered = newest_first(readings)
    recent = [_value(r) for r in ordered[:TREND_WINDOW]]
    older = [_value(r) for r in ordered[TREND_WINDOW : TREND_WINDOW * 2]]
    if not older:
        return Trend.STEADY

    recent_avg = fmean(recent)
    older_avg = fmean(older)
    if recent_avg > older_avg + TREND_THRESHOLD:
        return Trend.RISING
    if recent_avg < older_avg - TREND_THRESHOLD:
        return Trend.FALLING
    return Trend.STEADY


def compute_stats(
    readings: Sequence,
    now: Optional[datetime] = None,
    tz: tzinfo = timezone.utc,
    low: float = TARGET_LOW,
    high: float = TARGET_HIGH,
) -> ReadingStats:
    """
    Headline statistics: last value, today's and yesterday's averages with the
    day-over-day delta, in-range share and the 7-day trend arrow.

    Day boundaries are midnight in `tz`.
    """
    now = _local(now or datetime.now(timezone.utc), timezone.utc)
    ordered = newest_first(readings)
    if not ordered:
        return ReadingStats()

    today = _local(now, tz).date()
    yesterday = today - timedelta(days=1)
    avg_today = _mean([_value(r) for r in readings_on_day(ordered, today, tz)])
    avg_yesterday = _mean([_value(r) for r in readings_on_day(ordered, yesterday, tz)])
    delta = (
        avg_today - avg_yesterday
        if avg_today is not None and avg_yesterday is not None
        else None
    )

    last_week = readings_since(ordered, now - timedelta(days=RECENT_DAYS))
    in_range_count = sum(1 for r in ordered if low <= _value(r) <= high)

    return ReadingStats(
        last_reading=_value(ordered[0]),
        avg_today=avg_today,
        avg_yesterday=avg_yesterday,
        delta_from_yesterday=delta,
        total_readings=len(ordered),
        in_range_count=in_range_count,
        in_range_percentage=in_range_percentage(ordered, low, high),
        trend=compute_trend(last_week),
        readings_last_7_days=len(last_week),
    )


def meal_trends(readings: Sequence) -> List[MealTrend]:
    """Average, lowest and highest per meal type; None fields for meals with no readings"""
    trends = []
    for meal in MealType:
        values = [_value(r) for r in readings if _meal(r) == meal]
        trends.append(
            MealTrend(
                meal=meal,
                average=_mean(values),
                lowest=min(values) if values else None,
                highest=max(values) if values else None,
                count=len(values),
            )
        )
    return trends


def meal_averages(readings: Sequence) -> List[MealAverage]:
    """Per-meal averages in order of first appearance (newest first)"""
    totals: dict = {}
    for r in newest_first(readings):
        total, count = totals.get(_meal(r), (0.0, 0))
        totals[_meal(r)] = (total + _value(r), count + 1)
    return [
        MealAverage(meal=meal, average=total / count, count=count)
        for meal, (total, count) in totals.items()
    ]


def best_meal(
    averages: Sequence[MealAverage], low: float = TARGET_LOW, high: float = TARGET_HIGH
) -> Optional[MealAverage]:
    """
    Meal with the most stable readings: among meals whose average lies in the
    target band, the one with the highest average. When no average is in
    range, the first meal considered is kept.
    """
    best: Optional[MealAverage] = None
    for candidate in averages:
        avg = candidate.average
        if best is None:
            best = candidate
            continue
        best_in_range = low <= best.average <= high
        if low <= avg <= high and (not best_in_range or avg > best.average):
            best = candidate
    return best


def recommendations(
    seven_day_average: Optional[float],
    low_count: int,
    in_range_pct: float,
    low: float = TARGET_LOW,
    high: float = TARGET_HIGH,
) -> List[str]:
    tips = []
    if seven_day_average is not None and seven_day_average > high:
        tips.append(
            "Consider reducing carbohydrate intake or increasing activity level"
        )
    if low_count > 0:
        tips.append(
            "Monitor for low blood sugar symptoms and have quick-acting carbs available"
        )
    if in_range_pct > 80:
        tips.append("Great job! Keep up your current routine")
    tips.append(
        f"Aim for {low:g}-{high:g} mg/dL for optimal gestational diabetes management"
    )
    return tips


def compute_insights(
    readings: Sequence,
    now: Optional[datetime] = None,
    tz: tzinfo = timezone.utc,
    low: float = TARGET_LOW,
    high: float = TARGET_HIGH,
) -> InsightsResponse:
    """Insights page: 7-day average, distribution, meal analysis and tips"""
    now = _local(now or datetime.now(timezone.utc), timezone.utc)
    ordered = newest_first(readings)
    last_week = readings_since(ordered, now - timedelta(days=RECENT_DAYS))

    statuses = [classify(_value(r), low, high) for r in ordered]
    distribution = ReadingDistribution(
        low_count=statuses.count(RangeStatus.LOW),
        normal_count=statuses.count(RangeStatus.NORMAL),
        high_count=statuses.count(RangeStatus.HIGH),
    )
    seven_day_average = _mean([_value(r) for r in last_week])
    pct = in_range_percentage(ordered, low, high)
    averages = meal_averages(ordered)

    logger.debug(
        "insights computed: total=%d last_7_days=%d in_range=%.1f%%",
        len(ordered),
        len(last_week),
        pct,
    )

    return InsightsResponse(
        total_readings=len(ordered),
        seven_day_average=seven_day_average,
        readings_last_7_days=len(last_week),
        in_range_percentage=pct,
        distribution=distribution,
        meal_trends=meal_trends(last_week),
        meal_averages=averages,
        best_meal=best_meal(averages, low, high),
        trend=compute_trend(last_week),
        recommendations=recommendations(
            seven_day_average, distribution.low_count, pct, low, high
        ),
    )
