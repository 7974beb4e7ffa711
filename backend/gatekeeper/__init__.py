"""Gatekeeper Application Package — access funnel and guest account lifecycle.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)

Design Decisions:
    - Empty __init__.py: explicit imports only, no star exports
"""
