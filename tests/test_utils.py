import base64

import pytest

from strangerconnect.errors import DisallowedFileType, OversizedPayload
from strangerconnect.utils import (
    MAX_FILE_BYTES, check_file, clean_message, decoded_size,
)


def test_clean_message_censors_profanity():
    cleaned = clean_message("you are shit")
    assert "shit" not in cleaned
    assert "*" in cleaned


def test_clean_message_keeps_plain_text():
    assert clean_message("hi") == "hi"
    assert clean_message("  don't <3 Tom & Jerry ") == "don't <3 Tom & Jerry"
    assert clean_message("   ") == ""


def test_decoded_size_handles_data_urls():
    raw = b"hello world"
    encoded = base64.b64encode(raw).decode()
    assert decoded_size(encoded) == len(raw)
    assert decoded_size("data:text/plain;base64," + encoded) == len(raw)


def test_check_file_accepts_allowed_types():
    data = base64.b64encode(b"%PDF-1.4").decode()
    check_file("application/pdf", data)
    check_file("image/png", data)
    check_file("application/vnd.openxmlformats-officedocument.wordprocessingml.document", data)


def test_check_file_rejects_type():
    with pytest.raises(DisallowedFileType):
        check_file("application/x-msdownload", "AAAA")


def test_check_file_rejects_size():
    data = base64.b64encode(b"\0" * (MAX_FILE_BYTES + 1)).decode()
    with pytest.raises(OversizedPayload):
        check_file("image/png", data)


@pytest.mark.parametrize("mime_type", [
    "image/svg+xml",
    "application/msword-template",
    "text/html",
])
def test_check_file_requires_exact_type(mime_type):
    with pytest.raises(DisallowedFileType):
        check_file(mime_type, "AAAA")


def test_check_file_ignores_type_parameters():
    check_file("Image/JPEG; name=cat.jpg", "AAAA")
