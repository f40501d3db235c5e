"""Infrastructure Layer — database sessions, logging, request logs, notifications.

Invariants:
    - Infrastructure never decides domain outcomes; it translates and records
    - Side channels (api_logs, notifications) never fail the request they describe
"""
