"""Schemas for reading statistics and insights"""

from pydantic import BaseModel, Field
from typing import Optional, List

from domain.enums import MealType, Trend
from domain.schemas.reading_schemas import CAMEL_CONFIG


class ReadingStats(BaseModel):
    """Headline numbers for the home screen"""

    last_reading: Optional[float] = Field(None, description="Most recent value, mg/dL")
    avg_today: Optional[float] = Field(None, description="Mean of today's readings")
    avg_yesterday: Optional[float] = Field(
        None, description="Mean of yesterday's readings"
    )
    delta_from_yesterday: Optional[float] = Field(
        None, description="avg_today minus avg_yesterday when both exist"
    )
    total_readings: int = 0
    in_range_count: int = 0
    in_range_percentage: float = Field(
        0, description="Share of readings within the target band, 0-100"
    )
    trend: Trend = Trend.STEADY
    readings_last_7_days: int = 0

    model_config = CAMEL_CONFIG


class MealTrend(BaseModel):
    """Seven-day summary for one meal type"""

    meal: MealType
    average: Optional[float] = None
    lowest: Optional[float] = None
    highest: Optional[float] = None
    count: int = 0

    model_config = CAMEL_CONFIG


class MealAverage(BaseModel):
    """All-time average for one meal type"""

    meal: MealType
    average: float
    count: int

    model_config = CAMEL_CONFIG


class ReadingDistribution(BaseModel):
    """How readings fall relative to the target band"""

    low_count: int = 0
    normal_count: int = 0
    high_count: int = 0

    model_config = CAMEL_CONFIG


class InsightsResponse(BaseModel):
    """Insights page payload"""

    total_readings: int
    seven_day_average: Optional[float] = None
    readings_last_7_days: int = 0
    in_range_percentage: float = 0
    distribution: ReadingDistribution
    meal_trends: List[MealTrend] = Field(default_factory=list)
    meal_averages: List[MealAverage] = Field(default_factory=list)
    best_meal: Optional[MealAverage] = None
    trend: Trend = Trend.STEADY
    recommendations: List[str] = Field(default_factory=list)

    model_config = CAMEL_CONFIG
