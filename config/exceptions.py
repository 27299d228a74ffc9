import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from catalog.exceptions import StoreError

logger = logging.getLogger(__name__)


def custom_exception_handler(exc, context):
    """
    Consistent error body for the JSON API. Document store failures that
    reach a view become 503 instead of a server error.
    """
    response = exception_handler(exc, context)

    if response is None and isinstance(exc, StoreError):
        logger.error('Document store error in %s: %s', context.get('view').__class__.__name__, exc)
        response = Response({'error': str(exc)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)

    if response is not None:
        custom_response = {
            'success': False,
            'error': {
                'status_code': response.status_code,
                'message': get_error_message(response),
                'details': response.data if isinstance(response.data, dict) else {'error': response.data}
            }
        }
        response.data = custom_response

    return response


def get_error_message(response):
    """Human-readable summary of a status code."""
    messages = {
        400: 'Invalid Booking Details',
        403: 'Permission Denied',
        404: 'Not Found',
        405: 'Method Not Allowed',
        503: 'Catalog Unavailable',
    }

    return messages.get(response.status_code, 'An error occurred')
