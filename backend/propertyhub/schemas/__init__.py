"""Pydantic Schemas — request/response contracts for API endpoints.

Invariants:
    - Schemas validate shape at the system boundary; business rules live in services
    - Wire format is camelCase via schemas/base.py CamelModel

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
"""
