"""
VELO Django Adapter Views
=========================
HTTP surface over the access engine:

    GET  /v1/access/decision?path=       serialised decision for SPA clients
    POST /v1/auth/sign-out               end session, caches and impersonation
    GET  /admin/                         super-admin console (gated)
    POST /admin/impersonation/start      begin impersonating a tenant (gated)
    POST /admin/impersonation/exit       end impersonation (always reachable)
    POST /admin/tenants/<id>/<action>    tenant lifecycle action (gated)

Page views are placeholders: rendering is not this adapter's job.
"""

from __future__ import annotations

import json
from typing import Any

from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST

from core.audit import OUTCOME_APPLIED, TENANT_ACTION_KINDS, AuditEvent, record_safely
from core.tenancy.lifecycle import TenantLifecycleError, apply_admin_action

from adapters.django_api.guard import (
    evaluate_request,
    guard_admin_console,
    guard_route,
)
from adapters.django_api.identity import clear_session_user, session_user_id
from adapters.django_api.responses import json_error, success_response
from adapters.django_api.wiring import build_dependencies


def _parse_json_body(request: HttpRequest) -> dict[str, Any]:
    if not request.body:
        return {}
    try:
        parsed = json.loads(request.body.decode("utf-8"))
    except Exception as exc:
        raise ValueError("Request body must be valid JSON.") from exc
    if not isinstance(parsed, dict):
        raise ValueError("Request body must be a JSON object.")
    return parsed


def _tenant_dict(tenant) -> dict[str, Any]:
    return {
        "tenant_id": tenant.tenant_id,
        "name": tenant.name,
        "status": tenant.status.value,
        "plan_tier": tenant.plan_tier.value,
        "business_type": (
            None if tenant.business_type is None else tenant.business_type.value
        ),
        "trial_end_at": (
            None if tenant.trial_end_at is None else tenant.trial_end_at.isoformat()
        ),
    }


# ══════════════════════════════════════════════════════════════
# ACCESS DECISION
# ══════════════════════════════════════════════════════════════

@require_GET
def access_decision_view(request: HttpRequest) -> JsonResponse:
    path = request.GET.get("path")
    if not path:
        return json_error("INVALID_REQUEST", "path is required.")
    decision = evaluate_request(request, path)
    return JsonResponse(success_response({"path": path, "decision": decision.to_dict()}))


# ══════════════════════════════════════════════════════════════
# SIGN-OUT
# ══════════════════════════════════════════════════════════════

@csrf_exempt
@require_POST
def sign_out_view(request: HttpRequest) -> JsonResponse:
    deps = build_dependencies()
    user_id = session_user_id(request)
    ended = False
    if user_id is not None:
        ended = deps.impersonation_for(request).on_sign_out(user_id)
        deps.resolver.invalidate(user_id)
    clear_session_user(request)
    return JsonResponse(
        success_response({"signed_out": user_id is not None, "impersonation_ended": ended})
    )


# ══════════════════════════════════════════════════════════════
# SUPER-ADMIN CONSOLE
# ══════════════════════════════════════════════════════════════

@require_GET
@guard_admin_console
def admin_console_view(request: HttpRequest) -> JsonResponse:
    deps = build_dependencies()
    return JsonResponse(
        success_response({"tenants": [_tenant_dict(t) for t in deps.store.tenants()]})
    )


@csrf_exempt
@require_POST
@guard_admin_console
def impersonation_start_view(request: HttpRequest) -> JsonResponse:
    deps = build_dependencies()
    try:
        body = _parse_json_body(request)
        tenant_id = body["tenant_id"]
        target_user_id = body["target_user_id"]
    except (ValueError, KeyError) as exc:
        return json_error("INVALID_REQUEST", str(exc))

    tenant = deps.store.get_tenant(tenant_id)
    if tenant is None:
        return json_error("NOT_FOUND", f"Tenant {tenant_id} not found.", status=404)

    try:
        session = deps.impersonation_for(request).start(
            actor_id=session_user_id(request),
            tenant_id=tenant_id,
            target_user_id=target_user_id,
            name_snapshot=tenant.name,
        )
    except ValueError as exc:
        return json_error("INVALID_REQUEST", str(exc))

    return JsonResponse(success_response({"impersonation": session.to_dict()}))


@csrf_exempt
@require_POST
def impersonation_exit_view(request: HttpRequest) -> JsonResponse:
    session = build_dependencies().impersonation_for(request).exit()
    return JsonResponse(success_response({"impersonation": session.to_dict()}))


@csrf_exempt
@require_POST
@guard_admin_console
def tenant_action_view(request: HttpRequest, tenant_id: str, action: str) -> JsonResponse:
    deps = build_dependencies()
    tenant = deps.store.get_tenant(tenant_id)
    if tenant is None:
        return json_error("NOT_FOUND", f"Tenant {tenant_id} not found.", status=404)

    now = deps.clock.now_utc()
    try:
        updated = apply_admin_action(tenant, action, now, deps.settings)
    except TenantLifecycleError as exc:
        return json_error(
            "INVALID_TRANSITION", str(exc), status=409, status_value=exc.status.value
        )
    except ValueError as exc:
        return json_error("INVALID_REQUEST", str(exc))

    deps.store.put_tenant(updated)
    deps.resolver.invalidate_tenant(tenant_id)
    record_safely(
        deps.audit_sink,
        AuditEvent(
            kind=TENANT_ACTION_KINDS[action],
            actor_id=session_user_id(request),
            target_tenant_id=tenant_id,
            path=request.path,
            outcome=OUTCOME_APPLIED,
            occurred_at=now,
            metadata={
                "from_status": tenant.status.value,
                "to_status": updated.status.value,
            },
        ),
    )
    return JsonResponse(success_response({"tenant": _tenant_dict(updated)}))


# ══════════════════════════════════════════════════════════════
# PAGES (placeholders)
# ══════════════════════════════════════════════════════════════

@guard_route()
def page_view(request: HttpRequest, **kwargs) -> JsonResponse:
    return JsonResponse(success_response({"page": request.path}))


@guard_admin_console
def admin_page_view(request: HttpRequest, **kwargs) -> JsonResponse:
    return JsonResponse(success_response({"page": request.path}))


def status_page_view(request: HttpRequest, **kwargs) -> JsonResponse:
    """Sign-in, onboarding and blocking pages render without the guard."""
    return JsonResponse(
        success_response({"page": request.path, "from": request.GET.get("from")})
    )


def public_order_view(request: HttpRequest, **kwargs) -> JsonResponse:
    return JsonResponse(success_response({"page": request.path, "public": True}))
