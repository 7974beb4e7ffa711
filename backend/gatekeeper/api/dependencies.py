"""Route Dependencies — hand the lifespan-built components to route handlers.

Invariants:
    - Components are built once in the lifespan and stored on app.state
    - Tests replace them through app.dependency_overrides, never by patching modules
"""

from fastapi import Request

from gatekeeper.services.access_resolver import AccessResolver
from gatekeeper.services.card_binding import SqlResourceBinder


def get_access_resolver(request: Request) -> AccessResolver:
    return request.app.state.access_resolver


def get_resource_binder(request: Request) -> SqlResourceBinder:
    return request.app.state.resource_binder
