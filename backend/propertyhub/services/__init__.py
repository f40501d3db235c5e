"""Services Layer — auth, authorization, user administration and the property lifecycle.

Invariants:
    - Services receive the DatabaseSessionManager and the ActorContext explicitly
    - Every mutation runs in exactly one unit of work, audit row included

Design Decisions:
    - Plain module-level async functions; TokenManager is the one class because
      it carries signing settings
"""
