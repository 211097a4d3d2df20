"""
Domain errors and the project-wide DRF exception handler.

Every API error is rendered as ``{'ok': False, 'error': {...}}`` so the
client has one shape to display.  Collaborator failures (data store,
file storage) map to 502 and are logged; they are never retried.
"""
from __future__ import annotations

import logging

from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


class AppointmentValidationError(Exception):
    """Rejected appointment form.

    ``code`` is one of ``missing_fields``, ``invalid_date``,
    ``invalid_time`` or ``invalid_range``.
    """

    def __init__(self, code: str, message: str, fields: list[str] | None = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.fields = list(fields or [])


class StoreError(Exception):
    """The data store could not read or write a record."""

    code = 'store_error'


class RecordNotFound(StoreError):
    code = 'not_found'


class StorageError(Exception):
    """The file storage could not accept an upload."""

    code = 'storage_error'


def api_exception_handler(exc, context):
    if isinstance(exc, AppointmentValidationError):
        return Response(
            {'ok': False, 'error': {'code': exc.code, 'message': exc.message, 'fields': exc.fields}},
            status=400,
        )
    if isinstance(exc, RecordNotFound):
        return Response({'ok': False, 'error': {'code': exc.code, 'message': str(exc)}}, status=404)
    if isinstance(exc, (StoreError, StorageError)):
        logger.error("collaborator failure in %s: %s", context.get('view').__class__.__name__, exc)
        return Response({'ok': False, 'error': {'code': exc.code, 'message': str(exc)}}, status=502)

    resp = drf_exception_handler(exc, context)
    if resp is None:
        logger.exception("unhandled API error", exc_info=exc)
        return Response({'ok': False, 'error': {'code': 'server_error', 'message': str(exc)}}, status=500)
    # normalize response
    detail = None
    if isinstance(resp.data, dict):
        detail = resp.data.get('detail') or resp.data
    else:
        detail = str(resp.data)
    code = getattr(exc, 'default_code', None) or 'api_error'
    return Response({'ok': False, 'error': {'code': code, 'message': detail}}, status=resp.status_code, headers=_passthrough_headers(resp))


def _passthrough_headers(resp) -> dict:
    # Keep Retry-After / WWW-Authenticate set by throttling and auth
    return {k: v for k, v in resp.items() if k in ('Retry-After', 'WWW-Authenticate')}
