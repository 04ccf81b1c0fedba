"""Shared API error types and the DRF exception handler.

Error bodies always carry a ``message`` key; field-level validation errors
are nested under ``errors``.
"""

import logging

from django.conf import settings
from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class IntegrationError(APIException):
    """Raised when an external service (payments, e-signature) fails."""

    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = 'External service request failed.'
    default_code = 'integration_error'


def api_exception_handler(exc, context):
    response = exception_handler(exc, context)

    if response is None:
        request = context.get('request')
        logger.exception(
            'Unhandled error on %s %s',
            getattr(request, 'method', '?'),
            getattr(request, 'path', '?'),
        )
        if settings.DEBUG:
            return None
        return Response({'message': 'Internal server error'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    data = response.data
    if isinstance(exc, ValidationError):
        if isinstance(data, dict):
            response.data = {'message': 'Validation error', 'errors': data}
        else:
            response.data = {'message': 'Validation error', 'errors': {'non_field_errors': data}}
    elif isinstance(data, dict) and 'detail' in data:
        body = {'message': str(data.pop('detail'))}
        body.update(data)
        response.data = body

    if isinstance(exc, IntegrationError):
        logger.warning('Integration failure: %s', exc.detail)

    return response
