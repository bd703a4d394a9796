"""
Reading domain mappers.
Handles transformation between the Reading model and rows of the hosted
`readings` table, whose column names differ from ours (`meal` vs `meal_type`).
"""

from datetime import datetime, timezone
from typing import Any, Dict, Mapping
from uuid import UUID

from domain.enums import MealType, ActivityLevel
from domain.models import Reading


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        ts = value
    else:
        # PostgREST returns ISO 8601, sometimes with a trailing Z
        ts = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


class ReadingMapper:
    """Mapper for reading transformations."""

    # model attribute -> hosted column
    COLUMN_MAP = {
        "blood_sugar": "blood_sugar",
        "meal_type": "meal",
        "carbs": "carbs",
        "activity_level": "activity_level",
        "timestamp": "timestamp",
        "notes": "notes",
        "photo_url": "photo_url",
    }

    @staticmethod
    def from_row(row: Mapping[str, Any]) -> Reading:
        """
        Build a transient Reading from a hosted table row.

        Args:
            row: Row dict as returned by the Supabase client

        Returns:
            Reading instance (not attached to any SQLAlchemy session)
        """
        return Reading(
            id=UUID(str(row["id"])),
            user_id=UUID(str(row["user_id"])),
            blood_sugar=float(row["blood_sugar"]),
            meal_type=MealType(str(row["meal"]).lower()),
            carbs=int(row["carbs"]),
            activity_level=ActivityLevel(str(row["activity_level"]).lower()),
            timestamp=_parse_timestamp(row["timestamp"]),
            notes=row.get("notes"),
            photo_url=row.get("photo_url"),
        )

    @staticmethod
    def to_row(fields: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Convert model field values (full or partial) into hosted column values.

        Enums become their string values and datetimes ISO strings, since the
        payload is sent as JSON.
        """
        row: Dict[str, Any] = {}
        for attr, value in fields.items():
            column = ReadingMapper.COLUMN_MAP.get(attr)
            if column is None:
                continue
            if isinstance(value, (MealType, ActivityLevel)):
                value = value.value
            elif isinstance(value, datetime):
                value = value.isoformat()
            row[column] = value
        return row
