"""
Repositories package - Data access layer.
"""

from repositories.base import BaseRepository, ReadingStore
from repositories.reading_repository import ReadingRepository
from repositories.memory_reading_repository import MemoryReadingRepository, memory_store
from repositories.supabase_reading_repository import SupabaseReadingRepository

__all__ = [
    "BaseRepository",
    "ReadingStore",
    "ReadingRepository",
    "MemoryReadingRepository",
    "SupabaseReadingRepository",
    "memory_store",
]
