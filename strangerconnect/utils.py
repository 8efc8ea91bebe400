import time

from better_profanity import profanity

from .errors import DisallowedFileType, OversizedPayload

MAX_FILE_BYTES = 5 * 1024 * 1024

ALLOWED_FILE_TYPES = frozenset({
    "image/png",
    "image/jpeg",
    "image/gif",
    "image/webp",
    "image/bmp",
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
})

profanity.load_censor_words()


def now_ms() -> int:
    return int(time.time() * 1000)


def clean_message(content: str) -> str:
    """
    Trims and censors a chat message. Returns "" when nothing is left to send.
    """
    text = (content or "").strip()
    if not text:
        return ""
    return profanity.censor(text)


def decoded_size(data: str) -> int:
    """
    Byte size of a base64 payload, accepting "data:<mime>;base64,..." URLs.
    """
    if data.startswith("data:") and "," in data:
        data = data.split(",", 1)[1]
    data = data.strip()
    padding = len(data) - len(data.rstrip("="))
    return max(len(data) * 3 // 4 - padding, 0)


def check_file(mime_type: str, data: str, max_bytes: int = MAX_FILE_BYTES):
    """
    Raises OversizedPayload or DisallowedFileType for files we refuse to relay.
    """
    # "image/png; name=a.png" -> "image/png"
    base_type = mime_type.split(";", 1)[0].strip().lower()
    if base_type not in ALLOWED_FILE_TYPES:
        raise DisallowedFileType(mime_type)
    size = decoded_size(data)
    if size > max_bytes:
        raise OversizedPayload(f"{size} bytes exceeds {max_bytes}")
