"""
S3 access for the PDF operations.

``ObjectStore`` wraps a boto3 S3 client bound to the single bucket from the
settings. It reads source PDFs into memory, writes processed PDFs under the
``processed/`` prefix and issues the pre-signed URLs the frontend uses to
upload and download files directly from S3.
"""

import logging
import re
import time
import uuid
from contextlib import closing

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from pdf_tools.errors import ObjectNotFoundError, StorageError

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = 'application/pdf'
S3_UPLOADS_PREFIX = 'uploads/'
S3_PROCESSED_PREFIX = 'processed/'
READ_CHUNK_SIZE = 1024 * 1024
# Fixed lifetime of every pre-signed link (1 hour).
SIGNED_URL_EXPIRY_SECONDS = 3600

_NOT_FOUND_CODES = {'NoSuchKey', 'NotFound', '404'}


def create_s3_client(settings):
    # Signature v4 is required for pre-signed URLs outside us-east-1.
    return boto3.client(
        's3',
        region_name=settings.region,
        config=Config(signature_version='s3v4')
    )


def current_timestamp_ms():
    return int(time.time() * 1000)


def build_output_key(kind, timestamp, page_number=None):
    """
    Build the key of a processed file.

    Examples: ``processed/merged-1709123456789.pdf`` and, for split pages,
    ``processed/split-1709123456789-page-3.pdf``.
    """
    if page_number is None:
        return f"{S3_PROCESSED_PREFIX}{kind}-{timestamp}.pdf"
    return f"{S3_PROCESSED_PREFIX}{kind}-{timestamp}-page-{page_number}.pdf"


def sanitize_filename(filename):
    """
    Sanitize a file name with a whitelist of characters.

    Leading dots are dropped so a name can never become hidden or walk up the
    key hierarchy; a name with nothing left falls back to a random one.
    """
    safe_name = re.sub(r'[^a-zA-Z0-9._-]', '_', filename).lstrip('.')
    if not safe_name:
        return f"{uuid.uuid4()}.pdf"
    return safe_name


class ObjectStore:
    def __init__(self, client, settings):
        if not settings.bucket_name:
            raise ValueError('settings.bucket_name is required')
        self.client = client
        self.settings = settings
        self.bucket = settings.bucket_name

    # =========================================================================
    # Reading
    # =========================================================================

    def fetch(self, key):
        """Download ``key`` and return its content as bytes."""
        data, _ = self.fetch_with_size(key)
        return data

    def fetch_with_size(self, key):
        """
        Download ``key`` and return ``(data, declared_size)``.

        The body arrives as a stream; it is consumed chunk by chunk into one
        buffer and always closed, even when the read fails half-way. The
        declared size is S3's ``ContentLength`` and may be ``None``.
        """
        try:
            s3_object = self.client.get_object(Bucket=self.bucket, Key=key)
        except ClientError as exc:
            code = exc.response.get('Error', {}).get('Code')
            if code in _NOT_FOUND_CODES:
                raise ObjectNotFoundError(f"Object not found: {key}", key=key) from exc
            raise StorageError(f"Failed to download {key}: {exc}", key=key) from exc
        except BotoCoreError as exc:
            raise StorageError(f"Failed to download {key}: {exc}", key=key) from exc

        declared_size = s3_object.get('ContentLength')
        buffer = bytearray()
        try:
            with closing(s3_object['Body']) as body:
                for chunk in body.iter_chunks(chunk_size=READ_CHUNK_SIZE):
                    buffer.extend(chunk)
        except (BotoCoreError, ClientError, OSError) as exc:
            raise StorageError(f"Download of {key} was interrupted: {exc}", key=key) from exc

        if declared_size is not None and declared_size != len(buffer):
            raise StorageError(
                f"Download of {key} was incomplete: got {len(buffer)} of {declared_size} bytes",
                key=key,
            )

        logger.debug("Fetched %s (%d bytes)", key, len(buffer))
        return bytes(buffer), declared_size

    # =========================================================================
    # Writing
    # =========================================================================

    def store(self, data, key):
        """
        Upload ``data`` as a PDF under ``key`` and return a download URL for it.

        The URL is only signed once the upload succeeded, so a link is never
        handed out for an object that does not exist.
        """
        try:
            self.client.put_object(
                Body=data,
                Bucket=self.bucket,
                Key=key,
                ContentType=PDF_CONTENT_TYPE
            )
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Failed to upload {key}: {exc}", key=key) from exc

        logger.debug("Stored %s (%d bytes)", key, len(data))
        return self.signed_download_url(key)

    def signed_download_url(self, key):
        try:
            return self.client.generate_presigned_url(
                'get_object',
                Params={'Bucket': self.bucket, 'Key': key},
                ExpiresIn=SIGNED_URL_EXPIRY_SECONDS
            )
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Failed to sign download URL for {key}: {exc}", key=key) from exc

    def presign_upload(self, file_name, transaction_id):
        """
        Generate a pre-signed POST policy for a direct browser upload.

        All files of one batch share ``transaction_id`` so they land in the same
        ``uploads/<transaction_id>/`` folder. Returns ``(key, post_details)``.
        """
        key = f"{S3_UPLOADS_PREFIX}{transaction_id}/{sanitize_filename(file_name)}"

        # The browser must send exactly this Content-Type in its FormData or S3
        # rejects the upload.
        fields = {'Content-Type': PDF_CONTENT_TYPE}
        conditions = [
            fields,
            ['content-length-range', 1, self.settings.max_upload_bytes]
        ]
        try:
            presigned_post = self.client.generate_presigned_post(
                Bucket=self.bucket,
                Key=key,
                Fields=fields,
                Conditions=conditions,
                ExpiresIn=SIGNED_URL_EXPIRY_SECONDS
            )
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Failed to sign upload for {key}: {exc}", key=key) from exc
        return key, presigned_post
