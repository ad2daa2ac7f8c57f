"""
Request validation.

Nothing coming from the frontend is trusted: every field an operation needs is
checked here before any S3 or PDF work starts. Failures raise
``ValidationError`` with the message shown to the user.
"""

import re

from pdf_tools.errors import ValidationError

ALLOWED_ROTATIONS = (90, -90, 180)
MIN_MERGE_FILES = 2
MIN_SPLIT_PAGES = 2

# Plain decimal notation only: no digit separators, no nan/inf.
_NUMERIC_RE = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?", re.ASCII)


def validate_merge(body):
    """Return the ordered list of source keys for a merge request."""
    file_keys = body.get('fileKeys')
    if not isinstance(file_keys, list) or len(file_keys) < MIN_MERGE_FILES:
        raise ValidationError('Please provide at least 2 PDF files to merge')
    for key in file_keys:
        if not isinstance(key, str) or not key.strip():
            raise ValidationError('Every file key must be a non-empty string')
    return list(file_keys)


def validate_file_key(body, operation):
    file_key = body.get('fileKey')
    if not isinstance(file_key, str) or not file_key.strip():
        raise ValidationError(f'Please provide a PDF file to {operation}')
    return file_key


def _coerce_number(value):
    # Numbers and numeric strings only; True/None would otherwise slip through
    # as 1/0.
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str) and _NUMERIC_RE.fullmatch(value.strip()):
        return float(value.strip())
    return None


def validate_rotation(value):
    """Return the rotation as an int if it is one of 90, -90 or 180 degrees."""
    angle = _coerce_number(value)
    if angle is None or angle not in ALLOWED_ROTATIONS:
        raise ValidationError('Invalid rotation. Must be 90, -90, or 180 degrees')
    return int(angle)


def validate_rotate(body):
    file_key = validate_file_key(body, 'rotate')
    return file_key, validate_rotation(body.get('rotation'))


def validate_split_page_count(page_count):
    if page_count < MIN_SPLIT_PAGES:
        raise ValidationError('PDF must have at least 2 pages to split')


def validate_upload(body, max_files):
    """Return the list of file names to generate upload URLs for."""
    file_names = body.get('fileNames')
    if not isinstance(file_names, list) or not 1 <= len(file_names) <= max_files:
        raise ValidationError(
            f"'fileNames' must be a list containing 1 to {max_files} file names."
        )
    for name in file_names:
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("Every entry in 'fileNames' must be a non-empty string.")
    return list(file_names)
