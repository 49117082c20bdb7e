"""Alembic migration scripts shipped with the package (env.py, versions/)."""
