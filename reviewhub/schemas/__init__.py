"""Pydantic Schemas — request/response validation for API endpoints.

Invariants:
    - Request schemas forbid unknown fields and blank identifiers
    - Response helpers render core entities, never ORM rows

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
"""
