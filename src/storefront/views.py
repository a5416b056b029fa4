import structlog
from django.db import DatabaseError, connection
from django.http import HttpRequest, JsonResponse

from .http import allow_methods, fail, ok

log = structlog.get_logger(__name__)


@allow_methods("GET")
def health(request: HttpRequest) -> JsonResponse:
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
    except DatabaseError as e:
        log.warning("health.database_unavailable", error=str(e))
        return fail("database_unavailable", "Database is not reachable", status=503)
    return ok({"status": "ok", "database": connection.vendor})


def not_found(request: HttpRequest, exception: Exception) -> JsonResponse:
    return fail("not_found", f"No endpoint at {request.path}", status=404)


def server_error(request: HttpRequest) -> JsonResponse:
    return fail("internal_error", "Something went wrong, please try again later", status=500)
