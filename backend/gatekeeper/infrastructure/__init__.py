"""Infrastructure Layer — external service clients and cross-cutting concerns.

Invariants:
    - Infrastructure never makes access decisions; it returns data for core/ to judge
    - External calls map every failure to a typed result or GatekeeperError

Design Decisions:
    - Thin wrappers over raw clients (httpx, SQLAlchemy) keep error mapping in one place
"""
