import pytest

from pdf_tools.errors import ValidationError
from pdf_tools.validation import (
    validate_file_key,
    validate_merge,
    validate_rotate,
    validate_rotation,
    validate_split_page_count,
    validate_upload,
)


def test_validate_merge_keeps_caller_order():
    keys = ["uploads/b.pdf", "uploads/a.pdf", "uploads/c.pdf"]

    assert validate_merge({"fileKeys": keys}) == keys


@pytest.mark.parametrize("body", [{}, {"fileKeys": None}, {"fileKeys": []}, {"fileKeys": ["only.pdf"]}, {"fileKeys": "a.pdf,b.pdf"}])
def test_validate_merge_requires_two_files(body):
    with pytest.raises(ValidationError, match="at least 2 PDF files"):
        validate_merge(body)


def test_validate_merge_rejects_blank_keys():
    with pytest.raises(ValidationError, match="non-empty string"):
        validate_merge({"fileKeys": ["uploads/a.pdf", "  "]})


@pytest.mark.parametrize("body", [{}, {"fileKey": ""}, {"fileKey": None}, {"fileKey": 12}])
def test_validate_file_key_names_the_operation(body):
    with pytest.raises(ValidationError, match="Please provide a PDF file to split"):
        validate_file_key(body, "split")


@pytest.mark.parametrize("value, expected", [(90, 90), (-90, -90), (180, 180), ("90", 90), (" -90 ", -90), (180.0, 180), ("+180", 180), ("9e1", 90)])
def test_validate_rotation_accepts_allowed_angles(value, expected):
    angle = validate_rotation(value)

    assert angle == expected
    assert isinstance(angle, int)


@pytest.mark.parametrize("value", [45, 0, 270, 360, "abc", "", None, True, [90], "nan", "inf", "9_0", "\u0669\u0660"])
def test_validate_rotation_rejects_everything_else(value):
    with pytest.raises(ValidationError, match="Invalid rotation"):
        validate_rotation(value)


def test_validate_rotate_checks_file_key_before_rotation():
    with pytest.raises(ValidationError, match="to rotate"):
        validate_rotate({"rotation": 45})


def test_validate_split_page_count():
    validate_split_page_count(2)
    with pytest.raises(ValidationError, match="at least 2 pages"):
        validate_split_page_count(1)


def test_validate_upload_enforces_batch_limit():
    assert validate_upload({"fileNames": ["a.pdf"]}, max_files=2) == ["a.pdf"]
    with pytest.raises(ValidationError, match="1 to 2 file names"):
        validate_upload({"fileNames": ["a.pdf", "b.pdf", "c.pdf"]}, max_files=2)
    with pytest.raises(ValidationError):
        validate_upload({"fileNames": []}, max_files=2)
