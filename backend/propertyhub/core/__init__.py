"""Core Layer — pure domain rules, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - All functions are pure and deterministic given their inputs (including `now`)

Design Decisions:
    - Functional core separated from imperative shell: services/ fetch and
      persist, core/ decides
"""
