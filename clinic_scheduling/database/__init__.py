"""
Database setup: declarative Base and async session management.
"""

from clinic_scheduling.database.base import Base, TimestampMixin

__all__ = ["Base", "TimestampMixin"]
