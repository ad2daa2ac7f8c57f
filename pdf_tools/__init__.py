"""
Backend for the PDF tools application.

Each operation (merge, split, compress, rotate) follows the same pipeline:
the source PDFs are fetched from S3, transformed in memory with pypdf, written
back under a fresh key in the ``processed/`` prefix and returned to the
frontend as a temporary pre-signed download link.
"""

__version__ = "1.0.0"
