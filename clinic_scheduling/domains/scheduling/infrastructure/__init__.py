"""
Scheduling Infrastructure Layer

SQLAlchemy, in-memory and cache adapters for the scheduling ports.
"""
