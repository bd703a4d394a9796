"""
Domain enums for the Ander blood sugar tracker.
Contains all enumeration types used across the domain models.
"""

import enum


class MealType(str, enum.Enum):
    """Meal context a reading was taken in"""

    FASTED = "fasted"
    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"


class ActivityLevel(str, enum.Enum):
    """Physical activity around the reading"""

    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"


class Trend(str, enum.Enum):
    """Coarse direction of recent readings"""

    RISING = "↗"
    FALLING = "↘"
    STEADY = "→"


class RangeStatus(str, enum.Enum):
    """Position of a value relative to the target band"""

    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"


class StorageBackend(str, enum.Enum):
    """Where readings are persisted"""

    MEMORY = "memory"
    SQL = "sql"
    SUPABASE = "supabase"
