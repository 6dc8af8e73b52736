import logging
import traceback
from rest_framework.views import exception_handler
from rest_framework.response import Response
from rest_framework import status
from django.http import Http404
from django.core.exceptions import PermissionDenied, ValidationError
from django.db.utils import IntegrityError
from django.conf import settings

logger = logging.getLogger('abbey')

# Django exceptions DRF leaves unhandled, with the status and error they map to
DJANGO_ERRORS = (
    (Http404, status.HTTP_404_NOT_FOUND, 'Not found'),
    (PermissionDenied, status.HTTP_403_FORBIDDEN, 'Permission denied'),
    (IntegrityError, status.HTTP_400_BAD_REQUEST, 'Database integrity error'),
)


def _error_message(data):
    """
    Pick a single human readable message out of a DRF error payload.
    """
    if isinstance(data, dict):
        if 'detail' in data:
            return str(data['detail'])
        for value in data.values():
            return _error_message(value)
    if isinstance(data, list) and data:
        return _error_message(data[0])
    return str(data)


def _describe(context):
    request = context.get('request')
    view = context.get('view')
    where = f"{request.method} {request.path}" if request is not None else 'unknown request'
    return f"{view.__class__.__name__} ({where})"


def _unhandled(exc, context):
    """Response for an exception DRF's own handler did not recognize"""
    if isinstance(exc, ValidationError):
        detail = exc.message_dict if hasattr(exc, 'message_dict') else exc.messages
        return Response(
            {'error': _error_message(detail), 'detail': detail},
            status=status.HTTP_400_BAD_REQUEST
        )

    for exc_class, status_code, error in DJANGO_ERRORS:
        if isinstance(exc, exc_class):
            return Response({'error': error, 'detail': str(exc)}, status=status_code)

    logger.error(
        f"Uncaught exception in {_describe(context)}: "
        f"{exc.__class__.__name__}: {exc}\n"
        f"Traceback: {traceback.format_exc()}"
    )

    # Never leak internals outside debug mode
    detail = str(exc) if settings.DEBUG else "An unexpected error occurred. Please try again later."
    return Response(
        {'error': 'Internal server error', 'detail': detail},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR
    )


def custom_exception_handler(exc, context):
    """
    Custom exception handler for DRF that provides consistent error responses
    and logs exceptions for debugging.

    Every failure leaves the API as ``{"error": <message>, "detail": <payload>}``
    plus a ``code`` for errors raised as APIException subclasses.
    """
    response = exception_handler(exc, context)

    if response is None:
        response = _unhandled(exc, context)
        if response.status_code < 500:
            logger.warning(f"{exc.__class__.__name__} in {_describe(context)}: {exc}")
        return response

    data = response.data
    message = _error_message(data)
    logger.warning(
        f"{exc.__class__.__name__} in {_describe(context)}: {response.status_code} {message}"
    )

    payload = {'error': message, 'detail': data}
    if isinstance(data, dict) and set(data) == {'detail'}:
        payload['detail'] = data['detail']
    code = getattr(exc, 'default_code', None)
    if code:
        payload['code'] = code
    response.data = payload

    return response
