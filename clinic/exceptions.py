import logging

from django.db import IntegrityError
from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


class Conflict(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'A record with that value already exists.'
    default_code = 'conflict'


def flatten_errors(detail) -> list[str]:
    """Collapse DRF's nested error structure into a flat list of messages."""
    if isinstance(detail, dict):
        out: list[str] = []
        for value in detail.values():
            out.extend(flatten_errors(value))
        return out
    if isinstance(detail, (list, tuple)):
        out = []
        for value in detail:
            out.extend(flatten_errors(value))
        return out
    return [str(detail)] if detail else []


def api_exception_handler(exc, context):
    if isinstance(exc, IntegrityError):
        # Uniqueness races that slipped past the service-level checks
        logger.warning('Integrity error in %s: %s', context.get('view'), exc)
        exc = Conflict()
    resp = drf_exception_handler(exc, context)
    if resp is None:
        logger.exception('Unhandled API error in %s', context.get('view'), exc_info=exc)
        return Response({'message': 'Internal server error.'}, status=500)
    if isinstance(exc, ValidationError):
        return Response(
            {'message': 'Validation failed.', 'errors': flatten_errors(exc.detail)},
            status=resp.status_code,
        )
    detail = resp.data.get('detail') if isinstance(resp.data, dict) else resp.data
    return Response({'message': str(detail)}, status=resp.status_code, headers=_auth_headers(resp))


def _auth_headers(resp) -> dict:
    headers = {}
    for name in ('WWW-Authenticate', 'Retry-After'):
        if resp.has_header(name):
            headers[name] = resp[name]
    return headers
