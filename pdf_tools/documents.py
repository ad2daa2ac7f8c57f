"""
In-memory PDF transformations built on pypdf.

Every function takes raw PDF bytes, works on decoded documents in memory and
returns the serialised result. Pages are always copied into a new
``PdfWriter``, which clones them, so the source document is never modified.
"""

from contextlib import contextmanager
from io import BytesIO

from pypdf import PasswordType, PdfReader, PdfWriter
from pypdf.errors import PyPdfError

from pdf_tools.errors import DocumentDecodeError


@contextmanager
def _decoding():
    """Translate any pypdf failure while reading or rewriting a document."""
    try:
        yield
    except (PyPdfError, ValueError, KeyError, TypeError, AttributeError, IndexError) as exc:
        raise DocumentDecodeError(f"Could not read PDF document: {exc}") from exc


def load_document(data, ignore_encryption=False):
    """
    Decode ``data`` into a ``PdfReader``.

    The page tree is read eagerly so a broken file fails here rather than in
    the middle of a transformation. With ``ignore_encryption`` an encrypted
    document is opened with the empty user password, which covers files that
    are only protected against editing.
    """
    with _decoding():
        reader = PdfReader(BytesIO(data))
        if reader.is_encrypted and ignore_encryption:
            if reader.decrypt('') == PasswordType.NOT_DECRYPTED:
                raise DocumentDecodeError("PDF document is password protected")
        len(reader.pages)
    return reader


def _serialize(writer):
    output_stream = BytesIO()
    writer.write(output_stream)
    writer.close()
    return output_stream.getvalue()


def count_pages(data):
    return len(load_document(data).pages)


def merge_documents(sources):
    """
    Concatenate the pages of ``sources`` (an iterable of PDF bytes).

    Documents are appended in the order given, each with its pages in their
    original order. ``sources`` may be a generator so each file is only
    downloaded when its turn comes. Returns ``(merged_bytes, page_count)``.
    """
    merger = PdfWriter()
    for data in sources:
        reader = load_document(data)
        with _decoding():
            for page in reader.pages:
                merger.add_page(page)
    with _decoding():
        page_count = len(merger.pages)
        return _serialize(merger), page_count


def split_document(reader):
    """
    Return ``[(page_number, page_bytes), ...]`` for every page of ``reader``.

    Page numbers start at 1. Every page is serialised before anything is
    returned, so a page that cannot be written fails the whole split.
    """
    parts = []
    with _decoding():
        for index, page in enumerate(reader.pages):
            single_page = PdfWriter()
            single_page.add_page(page)
            parts.append((index + 1, _serialize(single_page)))
    return parts


def compress_document(data):
    """
    Re-serialise a PDF more compactly.

    Page content streams are flate-compressed and identical or unreferenced
    objects are dropped. The result is not guaranteed to be smaller than the
    input.
    """
    reader = load_document(data, ignore_encryption=True)
    with _decoding():
        writer = PdfWriter(clone_from=reader)
        for page in writer.pages:
            page.compress_content_streams(level=9)
        writer.compress_identical_objects(remove_duplicates=True, remove_unreferenced=True)
        return _serialize(writer)


def rotate_document(data, rotation):
    """
    Add ``rotation`` degrees to every page and return ``(bytes, page_count)``.

    The angle accumulates on top of the page's existing rotation and is not
    normalised to 0-359: a page at 270 rotated by 180 ends up at 450.
    """
    reader = load_document(data)
    with _decoding():
        writer = PdfWriter(clone_from=reader)
        for page in writer.pages:
            # rotate() adds to /Rotate as-is; the rotation setter would wrap it.
            page.rotate(rotation)
        page_count = len(writer.pages)
        return _serialize(writer), page_count
