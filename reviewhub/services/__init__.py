"""Services Layer — the assignment engine.

Invariants:
    - Every multi-row mutation runs inside one DatabaseSessionManager.transaction()
    - Results returned to callers are read back after commit
"""
