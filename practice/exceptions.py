"""
API error envelope.

Every error response has the shape ``{"ok": false, "error": <message>,
"code": <code>}``.  ``error`` is always a human readable string the
front-end can show as is; validation errors add ``fields`` with the
per-field messages, and domain errors may add their own detail keys.
"""
import logging

from django.core.exceptions import PermissionDenied
from django.http import Http404
from rest_framework.views import exception_handler as drf_exception_handler
from rest_framework.response import Response

logger = logging.getLogger('practice.api')

# Django exceptions DRF converts but which carry no code of their own
_DJANGO_CODES = {Http404: 'not_found', PermissionDenied: 'permission_denied'}


def error_response(message: str, *, code: str, status: int, **extra) -> Response:
    return Response({'ok': False, 'error': message, 'code': code, **extra}, status=status)


def _first_message(data):
    """Flatten DRF's error payload into one readable string naming the field."""
    if isinstance(data, dict):
        if 'detail' in data:
            return str(data['detail'])
        for field, errors in data.items():
            msg = _first_message(errors)
            return msg if field == 'non_field_errors' else f"{field}: {msg}"
        return ''
    if isinstance(data, list):
        return _first_message(data[0]) if data else ''
    return str(data)


def api_exception_handler(exc, context):
    resp = drf_exception_handler(exc, context)
    if resp is None:
        request = context.get('request')
        logger.error('unhandled error on %s %s', getattr(request, 'method', '?'),
                     getattr(request, 'path', '?'), exc_info=exc)
        return error_response('Internal server error', code='server_error', status=500)
    # normalize response, keeping headers such as WWW-Authenticate
    body = {
        'ok': False,
        'error': _first_message(resp.data),
        'code': _DJANGO_CODES.get(type(exc)) or getattr(exc, 'default_code', None) or 'api_error',
    }
    if isinstance(resp.data, dict) and 'detail' not in resp.data:
        body['fields'] = resp.data
    resp.data = body
    return resp
