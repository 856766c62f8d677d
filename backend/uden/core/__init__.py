"""Core Layer — pure domain logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - Collaborators are described as Protocols (repository_protocols.py), never imported
"""
