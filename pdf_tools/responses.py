"""
API Gateway response helpers shared by every operation.
"""

import json

# The frontend is served from a different origin than API Gateway, so every
# response (errors included) must carry these or the browser drops the body.
CORS_HEADERS = {
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Headers': 'Content-Type',
    'Access-Control-Allow-Methods': 'POST, OPTIONS'
}


def make_response(status_code, body):
    """
    Create a standard JSON API response object for API Gateway.

    The body is serialised to JSON unless it is already a string, and the CORS
    headers are attached to every response.
    """
    if not isinstance(body, str):
        body = json.dumps(body)

    return {
        'statusCode': status_code,
        'headers': dict(CORS_HEADERS),
        'body': body
    }


def error_response(status_code, message):
    return make_response(status_code, {'error': message})


def format_bytes(size):
    """Render a byte count as ``"340 B"``, ``"12.5 KB"`` or ``"2.4 MB"``."""
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"
