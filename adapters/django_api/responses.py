"""
VELO Django Adapter - Response Envelope
=======================================
Stable {"ok": ..., "data"|"error": ...} envelope for every JSON
response, plus the Decision -> HttpResponse mapping used by guards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Optional
from urllib.parse import urlencode

from django.http import HttpRequest, HttpResponse, HttpResponseRedirect, JsonResponse

from core.policy.decisions import Allow, AllowWithUpsell, Denied, Pending, Redirect

RETRY_AFTER_SECONDS = 1


@dataclass(frozen=True)
class ApiErrorBody:
    code: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": dict(self.details),
        }


@dataclass(frozen=True)
class ApiResponse:
    ok: bool
    data: Any = None
    error: Optional[ApiErrorBody] = None

    def to_dict(self) -> dict[str, Any]:
        if self.ok:
            return {"ok": True, "data": self.data}
        if self.error is None:
            raise ValueError("error must be set when ok is False.")
        return {"ok": False, "error": self.error.to_dict()}


def error_response(
    *,
    code: str,
    message: str,
    details: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    return ApiResponse(
        ok=False,
        error=ApiErrorBody(code=code, message=message, details=details or {}),
    ).to_dict()


def success_response(data: Any) -> dict[str, Any]:
    return ApiResponse(ok=True, data=data).to_dict()


def json_error(code: str, message: str, status: int = 400, **details) -> JsonResponse:
    return JsonResponse(
        error_response(code=code, message=message, details=details),
        status=status,
    )


def redirect_location(decision: Redirect) -> str:
    if not decision.preserve_origin:
        return decision.target
    return f"{decision.target}?{urlencode({'from': decision.preserve_origin})}"


def decision_response(
    decision,
    request: HttpRequest,
    render: Callable[[], HttpResponse],
) -> HttpResponse:
    """
    Map a Decision to HTTP.

        Pending          202 + Retry-After, nothing rendered
        Redirect         302 to target (?from= keeps the origin)
        AllowWithUpsell  200 upsell body in place of the view
        Denied           403
        Allow            render()
    """
    if isinstance(decision, Allow):
        return render()

    if isinstance(decision, Pending):
        response = JsonResponse(
            success_response({"decision": decision.to_dict()}), status=202
        )
        response["Retry-After"] = str(RETRY_AFTER_SECONDS)
        return response

    if isinstance(decision, Redirect):
        return HttpResponseRedirect(redirect_location(decision))

    if isinstance(decision, AllowWithUpsell):
        return JsonResponse(
            success_response(
                {
                    "decision": decision.to_dict(),
                    "path": request.path,
                }
            ),
            status=200,
        )

    if isinstance(decision, Denied):
        return json_error(
            "SUPER_ADMIN_REQUIRED",
            "Super admin access required.",
            status=403,
            reason=decision.reason,
        )

    return json_error("INVALID_DECISION", "Unrecognised access decision.", status=500)
