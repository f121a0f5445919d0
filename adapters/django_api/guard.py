"""
VELO Django Adapter - Route Guards
==================================
Render-or-redirect for Django views.

guard_route() evaluates the access engine before a view runs;
guard_admin_console() evaluates the stricter console gate. Both
resolve every source synchronously for the request, so a Pending
result here means a source is genuinely unavailable (e.g. the
impersonated tenant's data never loaded), not that work is in flight.
"""

from __future__ import annotations

import functools
import logging
from typing import Callable, Optional, Union

from django.http import HttpRequest

from core.access.sources import AccessSources
from core.policy.decisions import Decision
from core.policy.inputs import AccessInputs
from core.routing.request import RouteRequest
from core.tenancy.models import SuperAdminFlag

from adapters.django_api.identity import identity_from_request
from adapters.django_api.responses import decision_response
from adapters.django_api.wiring import AccessDependencies, build_dependencies

logger = logging.getLogger("velo.adapters")

RouteArg = Union[RouteRequest, str, None]


def _route_for(request: HttpRequest, route: RouteArg, deps: AccessDependencies) -> RouteRequest:
    if isinstance(route, RouteRequest):
        return route
    return deps.catalog.request_for(route or request.path)


def build_access_inputs(
    request: HttpRequest,
    route: RouteRequest,
    deps: Optional[AccessDependencies] = None,
) -> AccessInputs:
    deps = deps or build_dependencies()
    sources = AccessSources(connectivity=deps.connectivity.current())

    identity = identity_from_request(request)
    sources.update_identity(identity)

    session = deps.impersonation_for(request).current()
    sources.set_impersonation(session)

    user_id = identity.user_id
    if user_id is not None:
        sources.set_super_admin(user_id, deps.resolver.resolve_super_admin(user_id))
        sources.set_tenant_state(user_id, deps.resolver.resolve_membership(user_id))
        if session.active and session.actor_super_admin_id == user_id:
            sources.set_impersonation_target(
                session, deps.resolver.resolve_impersonation_target(session)
            )

    return sources.snapshot(route, deps.clock.now_utc())


def evaluate_request(
    request: HttpRequest,
    route: RouteArg = None,
    deps: Optional[AccessDependencies] = None,
) -> Decision:
    deps = deps or build_dependencies()
    inputs = build_access_inputs(request, _route_for(request, route, deps), deps)
    return deps.engine.decide(inputs)


def guard_route(route: RouteArg = None) -> Callable:
    """
    View decorator. route may be a RouteRequest, a catalog path, or
    None to look up request.path in the route catalog.
    """

    def decorator(view):
        @functools.wraps(view)
        def wrapped(request: HttpRequest, *args, **kwargs):
            decision = evaluate_request(request, route)
            logger.debug(f"Guard {request.path}: {decision.to_dict()}")
            return decision_response(
                decision, request, lambda: view(request, *args, **kwargs)
            )

        return wrapped

    return decorator


def guard_admin_console(view):
    """View decorator for the /admin namespace."""

    @functools.wraps(view)
    def wrapped(request: HttpRequest, *args, **kwargs):
        deps = build_dependencies()
        identity = identity_from_request(request)

        super_admin = SuperAdminFlag.UNKNOWN
        if identity.user_id is not None:
            super_admin = deps.resolver.resolve_super_admin(identity.user_id)

        decision = deps.console_gate.evaluate(identity, super_admin, request.path)
        return decision_response(
            decision, request, lambda: view(request, *args, **kwargs)
        )

    return wrapped
