from io import BytesIO

import pytest
from botocore.exceptions import ClientError
from pypdf import PdfReader, PdfWriter

from pdf_tools.config import Settings
from pdf_tools.storage import ObjectStore


class FakeStreamingBody:
    def __init__(self, data: bytes, fail_after: int | None = None) -> None:
        self._data = data
        self._fail_after = fail_after
        self.closed = False

    def iter_chunks(self, chunk_size: int = 1024):
        for offset in range(0, len(self._data), 4):
            if self._fail_after is not None and offset >= self._fail_after:
                raise OSError("connection reset")
            yield self._data[offset:offset + 4]

    def close(self):
        self.closed = True


class FakeS3Client:
    """In-memory stand-in for the boto3 S3 client calls the store makes."""

    def __init__(self) -> None:
        self.objects: dict[str, bytes] = {}
        self.content_types: dict[str, str] = {}
        self.put_calls: list[str] = []
        self.signed: list[tuple[str, int]] = []
        self.bodies: list[FakeStreamingBody] = []
        self.fail_put = False
        self.fail_read_after: int | None = None
        self.declared_sizes: dict[str, int] = {}

    def get_object(self, Bucket: str, Key: str):
        if Key not in self.objects:
            raise ClientError(
                {"Error": {"Code": "NoSuchKey", "Message": "The specified key does not exist."}},
                "GetObject",
            )
        data = self.objects[Key]
        body = FakeStreamingBody(data, fail_after=self.fail_read_after)
        self.bodies.append(body)
        return {"Body": body, "ContentLength": self.declared_sizes.get(Key, len(data))}

    def put_object(self, Body, Bucket: str, Key: str, ContentType: str):
        self.put_calls.append(Key)
        if self.fail_put:
            raise ClientError({"Error": {"Code": "AccessDenied", "Message": "denied"}}, "PutObject")
        self.objects[Key] = bytes(Body)
        self.content_types[Key] = ContentType

    def generate_presigned_url(self, ClientMethod: str, Params: dict, ExpiresIn: int):
        self.signed.append((Params["Key"], ExpiresIn))
        return f"https://{Params['Bucket']}.s3.amazonaws.com/{Params['Key']}?method={ClientMethod}&expires={ExpiresIn}"

    def generate_presigned_post(self, Bucket: str, Key: str, Fields: dict, Conditions: list, ExpiresIn: int):
        return {
            "url": f"https://{Bucket}.s3.amazonaws.com/",
            "fields": {**Fields, "key": Key},
            "conditions": Conditions,
            "expires_in": ExpiresIn,
        }


def make_pdf(page_count: int, rotation: int = 0) -> bytes:
    writer = PdfWriter()
    for index in range(page_count):
        # Width encodes the page position so ordering can be checked after a merge.
        page = writer.add_blank_page(width=100 + index, height=200)
        if rotation:
            page.rotate(rotation)
    buffer = BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


def page_widths(data: bytes) -> list[int]:
    return [int(page.mediabox.width) for page in PdfReader(BytesIO(data)).pages]


def page_rotations(data: bytes) -> list[int]:
    return [page.rotation for page in PdfReader(BytesIO(data)).pages]


@pytest.fixture
def settings():
    return Settings(bucket_name="pdf-tools-test", region="us-east-1", environment="dev")


@pytest.fixture
def s3_client():
    return FakeS3Client()


@pytest.fixture
def store(s3_client, settings):
    return ObjectStore(s3_client, settings)
