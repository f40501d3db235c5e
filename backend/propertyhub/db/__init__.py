"""Database Declarative Base — shared SQLAlchemy Base for all models.

Invariants:
    - All sessions are async (AsyncSession), created by infrastructure/database.py

Design Decisions:
    - asyncpg driver for PostgreSQL (native async, no thread pool overhead)
"""
