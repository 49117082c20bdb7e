"""ReviewHub Application Package — pull request reviewer assignment service.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
