"""Services Layer — token issuance, OAuth login, registration and billing workflows.

Invariants:
    - Each workflow runs its steps strictly in sequence
    - Multi-write workflows define a compensating action for second-phase failure
"""
