"""Schemas for blood sugar readings"""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel
from typing import Optional
from datetime import datetime, timezone
from uuid import UUID

from domain.enums import MealType, ActivityLevel

BLOOD_SUGAR_MIN = 50
BLOOD_SUGAR_MAX = 500
CARBS_MIN = 0
CARBS_MAX = 150

# Readings travel as camelCase JSON; snake_case is accepted on input as well
CAMEL_CONFIG = ConfigDict(
    alias_generator=to_camel, populate_by_name=True, from_attributes=True
)


def _ensure_aware(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class ReadingCreate(BaseModel):
    """Schema for logging a new reading"""

    blood_sugar: float = Field(
        ...,
        ge=BLOOD_SUGAR_MIN,
        le=BLOOD_SUGAR_MAX,
        description="Blood sugar in mg/dL (50-500)",
    )
    meal_type: MealType = Field(..., description="Meal context of the reading")
    carbs: int = Field(
        ..., ge=CARBS_MIN, le=CARBS_MAX, description="Carbohydrates in grams (0-150)"
    )
    activity_level: ActivityLevel = Field(..., description="Activity level")
    timestamp: Optional[datetime] = Field(
        None, description="When the reading was taken; defaults to now"
    )
    notes: Optional[str] = Field(None, max_length=2000, description="Free-text note")
    photo_url: Optional[str] = Field(None, description="Public URL of a meal photo")

    model_config = CAMEL_CONFIG

    @field_validator("timestamp")
    @classmethod
    def timestamp_is_aware(cls, v):
        return _ensure_aware(v)

    @field_validator("blood_sugar")
    @classmethod
    def one_decimal(cls, v: float) -> float:
        return round(v, 1)


class ReadingUpdate(BaseModel):
    """Schema for a partial update; omitted fields are left untouched"""

    blood_sugar: Optional[float] = Field(None, ge=BLOOD_SUGAR_MIN, le=BLOOD_SUGAR_MAX)
    meal_type: Optional[MealType] = None
    carbs: Optional[int] = Field(None, ge=CARBS_MIN, le=CARBS_MAX)
    activity_level: Optional[ActivityLevel] = None
    timestamp: Optional[datetime] = None
    notes: Optional[str] = Field(None, max_length=2000)
    photo_url: Optional[str] = None

    model_config = CAMEL_CONFIG

    @field_validator("timestamp")
    @classmethod
    def timestamp_is_aware(cls, v):
        return _ensure_aware(v)

    @field_validator("blood_sugar")
    @classmethod
    def one_decimal(cls, v: Optional[float]) -> Optional[float]:
        return round(v, 1) if v is not None else v

    @model_validator(mode="after")
    def required_fields_not_null(self):
        for name in ("blood_sugar", "meal_type", "carbs", "activity_level", "timestamp"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{to_camel(name)} cannot be null")
        return self

    def changes(self) -> dict:
        """Fields the client actually sent"""
        return self.model_dump(exclude_unset=True)


class ReadingResponse(BaseModel):
    """Schema for a stored reading"""

    id: UUID
    user_id: UUID
    blood_sugar: float
    meal_type: MealType
    carbs: int
    activity_level: ActivityLevel
    timestamp: datetime
    notes: Optional[str] = None
    photo_url: Optional[str] = None

    model_config = CAMEL_CONFIG


class PhotoUploadResponse(BaseModel):
    """Where an uploaded meal photo can be fetched from"""

    url: str
    path: str
