"""
The request pipelines behind each endpoint.

Every operation takes the parsed request body and an ``ObjectStore`` and runs
the same steps: validate the input, fetch the source PDF(s) from S3, transform
them in memory, store the result under a new key and return the JSON payload
with a pre-signed download URL. Validation problems raise ``ValidationError``;
anything else propagates to the Lambda entry point.
"""

import logging
import math
import uuid

from pdf_tools import documents, validation
from pdf_tools.responses import format_bytes
from pdf_tools.storage import build_output_key, current_timestamp_ms

logger = logging.getLogger(__name__)


# =============================================================================
# Merge
# =============================================================================

def merge(body, store):
    file_keys = validation.validate_merge(body)

    # Sources are downloaded one at a time, in the order the user arranged them.
    sources = (store.fetch(key) for key in file_keys)
    merged_bytes, page_count = documents.merge_documents(sources)

    output_key = build_output_key('merged', current_timestamp_ms())
    download_url = store.store(merged_bytes, output_key)
    logger.info("Merged %d files (%d pages) into %s", len(file_keys), page_count, output_key)

    return {
        'message': 'PDFs merged successfully',
        'downloadUrl': download_url,
        'outputKey': output_key
    }


# =============================================================================
# Split
# =============================================================================

def split(body, store):
    file_key = validation.validate_file_key(body, 'split')

    reader = documents.load_document(store.fetch(file_key))
    page_count = len(reader.pages)
    validation.validate_split_page_count(page_count)

    # All pages are serialised before the first upload so a broken page never
    # leaves earlier pages stored and signed.
    parts = documents.split_document(reader)

    # One timestamp for the whole job so all pages share the same prefix.
    timestamp = current_timestamp_ms()
    pages = []
    for page_number, page_bytes in parts:
        output_key = build_output_key('split', timestamp, page_number)
        download_url = store.store(page_bytes, output_key)
        pages.append({
            'pageNumber': page_number,
            'downloadUrl': download_url,
            'outputKey': output_key
        })
    logger.info("Split %s into %d pages", file_key, page_count)

    return {
        'message': f'PDF split into {page_count} pages successfully',
        'pageCount': page_count,
        'pages': pages
    }


# =============================================================================
# Compress
# =============================================================================

def saved_percent(original_size, compressed_size):
    """Percentage saved, rounded half up and never below zero."""
    if original_size <= 0:
        return 0
    percent = math.floor((1 - compressed_size / original_size) * 100 + 0.5)
    return max(percent, 0)


def compress(body, store):
    file_key = validation.validate_file_key(body, 'compress')

    pdf_bytes, declared_size = store.fetch_with_size(file_key)
    original_size = declared_size or len(pdf_bytes)

    compressed_bytes = documents.compress_document(pdf_bytes)
    compressed_size = len(compressed_bytes)

    output_key = build_output_key('compressed', current_timestamp_ms())
    download_url = store.store(compressed_bytes, output_key)
    logger.info("Compressed %s from %d to %d bytes into %s",
                file_key, original_size, compressed_size, output_key)

    return {
        'message': 'PDF compressed successfully',
        'downloadUrl': download_url,
        'outputKey': output_key,
        'originalSize': format_bytes(original_size),
        'compressedSize': format_bytes(compressed_size),
        'savedPercent': saved_percent(original_size, compressed_size)
    }


# =============================================================================
# Rotate
# =============================================================================

def rotate(body, store):
    file_key, rotation = validation.validate_rotate(body)

    rotated_bytes, page_count = documents.rotate_document(store.fetch(file_key), rotation)

    output_key = build_output_key('rotated', current_timestamp_ms())
    download_url = store.store(rotated_bytes, output_key)
    logger.info("Rotated %s by %d degrees into %s", file_key, rotation, output_key)

    return {
        'message': f'PDF rotated {rotation} degrees successfully',
        'downloadUrl': download_url,
        'outputKey': output_key,
        'pageCount': page_count,
        'rotation': rotation
    }


# =============================================================================
# Upload
# =============================================================================

def upload(body, store):
    """
    Generate pre-signed POST policies so the browser can upload the source
    PDFs straight to S3 before calling one of the operations above.
    """
    file_names = validation.validate_upload(body, store.settings.max_upload_files)

    transaction_id = str(uuid.uuid4())
    response_parts = []
    for file_name in file_names:
        key, presigned_post = store.presign_upload(file_name, transaction_id)
        response_parts.append({
            'originalFileName': file_name,
            # The frontend passes these keys back as fileKey/fileKeys.
            'key': key,
            'post_details': presigned_post
        })

    return {'uploads': response_parts}
