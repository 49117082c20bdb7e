"""Infrastructure Layer — database access, migrations, and logging.

Invariants:
    - All SQLAlchemy errors leaving a session are mapped to DatabaseError
    - Repository functions never commit; the caller owns the transaction
"""
