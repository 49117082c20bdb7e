"""Core Layer — pure assignment rules, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - Randomness enters only through an injected random.Random

Design Decisions:
    - Functional core separated from imperative shell: services/ orchestrate
      transactions around the rules defined here
"""
