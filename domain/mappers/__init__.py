"""
Domain mappers package.
Handles transformation between ORM models, hosted-backend rows and DTOs.
"""

from domain.mappers.reading_mapper import ReadingMapper

__all__ = ["ReadingMapper"]
