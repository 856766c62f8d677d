"""Uden Backend Package — accounts, sessions, OAuth federation and billing.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
