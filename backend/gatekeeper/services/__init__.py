"""Services Layer — access resolution, card binding, and the guest reaper.

Invariants:
    - Services own all IO orchestration; decisions are delegated to core/
    - Collaborators are injected through constructors (no module globals)

Design Decisions:
    - One file per component for locality
"""
