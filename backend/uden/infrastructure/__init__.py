"""Infrastructure Layer — database, logging and clients for external collaborators.

Invariants:
    - Every outbound call has a bounded timeout
    - Transport failures are mapped to core.errors types before leaving this layer
"""
