"""JSON envelope and request-boundary error mapping shared by every view."""

from __future__ import annotations

import json
from functools import wraps
from typing import Any, Callable

import structlog
from django.http import HttpRequest, HttpResponseNotAllowed, JsonResponse
from django.views.decorators.http import require_http_methods

from .exceptions import StorefrontError, ValidationError

log = structlog.get_logger(__name__)


def ok(data: Any = None, *, status: int = 200, **extra: Any) -> JsonResponse:
    """
    Success envelope: {"success": true, "data": ...}.
    """
    payload = {"success": True, "data": data}
    payload.update(extra)
    return JsonResponse(payload, status=status)


def fail(code: str, message: str, *, status: int, details: Any = None) -> JsonResponse:
    error = {"code": code, "message": message}
    if details is not None:
        error["details"] = details
    return JsonResponse({"success": False, "error": error}, status=status)


def error_response(exc: StorefrontError) -> JsonResponse:
    return fail(exc.code, exc.message, status=exc.status, details=exc.details)


def api_endpoint(view: Callable[..., JsonResponse]):
    """
    Map exceptions escaping ``view`` onto the error envelope.

    Business errors keep their code, message and status. Anything else is
    logged with its traceback and answered with an opaque 500.
    """

    @wraps(view)
    def wrapper(request: HttpRequest, *args: Any, **kwargs: Any) -> JsonResponse:
        try:
            return view(request, *args, **kwargs)
        except StorefrontError as exc:
            log.info("request.rejected", code=exc.code, message=exc.message)
            return error_response(exc)
        except Exception:
            log.exception("request.failed", view=view.__name__)
            return fail("internal_error", "Something went wrong, please try again later", status=500)

    return wrapper


def allow_methods(*methods: str):
    """
    `require_http_methods` that answers other methods with an enveloped 405.
    """

    def decorator(view: Callable[..., JsonResponse]):
        guarded = require_http_methods(list(methods))(view)

        @wraps(view)
        def wrapper(request: HttpRequest, *args: Any, **kwargs: Any) -> JsonResponse:
            response = guarded(request, *args, **kwargs)
            if isinstance(response, HttpResponseNotAllowed):
                enveloped = fail(
                    "method_not_allowed", f"Method {request.method} is not allowed here", status=405
                )
                enveloped["Allow"] = response["Allow"]
                return enveloped
            return response

        return wrapper

    return decorator


def json_body(request: HttpRequest) -> dict[str, Any]:
    if not request.body:
        return {}
    try:
        data = json.loads(request.body)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ValidationError("Request body is not valid JSON") from e
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def clean(form_class, data: Any) -> dict[str, Any]:
    """
    Validate ``data`` with a Django form and return its cleaned data.
    """
    if not isinstance(data, dict):
        raise ValidationError("Expected a JSON object")
    form = form_class(data)
    if not form.is_valid():
        details = {field: [str(m) for m in messages] for field, messages in form.errors.items()}
        raise ValidationError("Invalid request", details=details)
    return form.cleaned_data
