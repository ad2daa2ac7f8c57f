"""
AWS Lambda entry points for the PDF tools backend.

The functions sit behind API Gateway and act as a thin layer between the
frontend and S3:

1.  upload: creates pre-signed POST URLs so the browser can send PDF files
    directly to the S3 bucket.

2.  merge / split / compress / rotate: download the uploaded PDFs from S3,
    process them in memory, upload the result to the ``processed/`` prefix and
    return pre-signed download links.

The stack can be deployed as a single function using ``lambda_handler``, which
routes on the request path, or as one function per operation using the
``*_handler`` functions below. Either way every response carries the CORS
headers, errors included.
"""

import base64
import functools
import json
import logging

from pdf_tools import operations
from pdf_tools.config import get_settings
from pdf_tools.errors import ConfigurationError, ValidationError
from pdf_tools.responses import error_response, make_response
from pdf_tools.storage import ObjectStore, create_s3_client

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = 'An internal server error occurred.'


# =============================================================================
# Helpers
# =============================================================================

@functools.lru_cache(maxsize=1)
def get_object_store():
    """
    Build the S3-backed store once per container and reuse it across
    invocations.
    """
    try:
        settings = get_settings()
    except ValueError as exc:
        raise ConfigurationError(f'Server configuration error: {exc}') from exc
    if not settings.bucket_name:
        raise ConfigurationError('Server configuration error: S3 bucket not specified.')
    return ObjectStore(create_s3_client(settings), settings)


def parse_body(event):
    """
    Return the request body as a dict.

    API Gateway may or may not base64 encode the body, so both cases are
    handled. A missing body is treated as an empty object.
    """
    body_str = event.get('body') or '{}'
    try:
        if event.get('isBase64Encoded', False):
            body_str = base64.b64decode(body_str).decode('utf-8')
        body = json.loads(body_str)
    except (ValueError, TypeError) as exc:
        raise ValidationError('Request body must be a JSON object') from exc

    if not isinstance(body, dict):
        raise ValidationError('Request body must be a JSON object')
    return body


def _request_id(context):
    return getattr(context, 'aws_request_id', None) or 'N/A'


def _run(operation, event, context):
    """
    Run one operation and turn its outcome into an API Gateway response.

    Validation errors become a 400 with the message for the user. Anything else
    is logged with its traceback and returned as a 500; outside production the
    actual error text is included to make debugging easier.
    """
    # Browser pre-flight check before the actual POST.
    if event.get('httpMethod') == 'OPTIONS':
        return make_response(200, {'message': 'CORS preflight successful'})

    try:
        store = get_object_store()
    except ConfigurationError as exc:
        logger.error("CRITICAL ERROR: %s", exc)
        return error_response(500, str(exc))

    try:
        body = parse_body(event)
        return make_response(200, operation(body, store))
    except ValidationError as exc:
        logger.info("Rejected request %s: %s", _request_id(context), exc)
        return error_response(400, str(exc))
    except Exception as exc:
        logger.exception("Unexpected error processing request %s", _request_id(context))
        message = GENERIC_ERROR_MESSAGE if store.settings.is_production else str(exc)
        return error_response(500, message)


# =============================================================================
# Handlers
# =============================================================================

def upload_handler(event, context):
    return _run(operations.upload, event, context)


def merge_handler(event, context):
    return _run(operations.merge, event, context)


def split_handler(event, context):
    return _run(operations.split, event, context)


def compress_handler(event, context):
    return _run(operations.compress, event, context)


def rotate_handler(event, context):
    return _run(operations.rotate, event, context)


ROUTES = {
    '/upload': upload_handler,
    '/merge': merge_handler,
    '/split': split_handler,
    '/compress': compress_handler,
    '/rotate': rotate_handler,
}


def lambda_handler(event, context):
    """Main entry point and router for the single-function deployment."""
    api_path = (event.get('path') or '').rstrip('/')
    for suffix, handler in ROUTES.items():
        if api_path.endswith(suffix):
            return handler(event, context)
    return error_response(404, 'Endpoint not found.')
