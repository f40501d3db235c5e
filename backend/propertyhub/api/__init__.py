"""API Layer — FastAPI routes, dependencies and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - All endpoints return the {success, message, data} envelope

Design Decisions:
    - Thin routes delegate to services; identity and permission checks are
      dependencies, so a route body only ever sees an authorized ActorContext
"""
