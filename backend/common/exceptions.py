"""DRF exception handler that renders every API error as ``{"error": ...}``."""

import logging

from rest_framework.response import Response
from rest_framework.views import exception_handler

from services.ride_management.exceptions import RideServiceError

logger = logging.getLogger(__name__)


def _first_message(detail):
    if isinstance(detail, dict):
        if "detail" in detail:
            return _first_message(detail["detail"])
        for field, value in detail.items():
            message = _first_message(value)
            if field == "non_field_errors":
                return message
            return f"{field}: {message}"
        return "Invalid request"
    if isinstance(detail, (list, tuple)):
        return _first_message(detail[0]) if detail else "Invalid request"
    return str(detail)


def service_error_response(exc: RideServiceError) -> Response:
    body = {"error": exc.message}
    if exc.errors:
        body["details"] = exc.errors
    return Response(body, status=exc.status_code)


def api_exception_handler(exc, context):
    """
    Wrap DRF's default handler.

    Ride service errors map to their own status code. Authentication
    failures, permission errors and serializer validation errors all come
    out with a single ``error`` string; field level errors are kept under
    ``details``.
    """
    if isinstance(exc, RideServiceError):
        logger.info("Ride service error (%s): %s", exc.status_code, exc.message)
        return service_error_response(exc)

    response = exception_handler(exc, context)
    if response is None:
        return None

    data = response.data
    if isinstance(data, dict) and "error" in data:
        return response

    body = {"error": _first_message(data)}
    if isinstance(data, list) or (isinstance(data, dict) and set(data) != {"detail"}):
        body["details"] = data

    response.data = body
    return response
