# src/upload/utils.py
import re
import secrets
import time
from typing import Optional

from src.upload.constants import DOCUMENT_TYPES, GIF, JPEG, MB, OCTET_STREAM, PDF, PNG, TEXT, WEBP

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9.-]")
_EXTENSION = re.compile(r"\.[^/.]+$")
_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def detect_mime_type(content: bytes) -> str:
    """Classify content by its leading magic bytes, ignoring any name or declared type."""
    if content[:2] == b"\xff\xd8":
        return JPEG
    if content[:4] == b"\x89PNG":
        return PNG
    if content[:3] == b"GIF":
        return GIF
    if content[:4] == b"RIFF" and content[8:12] == b"WEBP":
        return WEBP
    if content[:4] == b"%PDF":
        return PDF
    return TEXT


def resolve_content_type(content: bytes, declared_type: Optional[str] = None) -> str:
    """Content type to store under. Signatures win over the declared type."""
    sniffed = detect_mime_type(content)
    if sniffed != TEXT:
        return sniffed

    if declared_type in DOCUMENT_TYPES:
        return declared_type

    try:
        content.decode("utf-8")
    except UnicodeDecodeError:
        return OCTET_STREAM
    return TEXT


def _random_token(length: int = 11) -> str:
    return "".join(secrets.choice(_BASE36) for _ in range(length))


def generate_public_id(filename: str) -> str:
    timestamp = int(time.time() * 1000)
    clean_filename = _EXTENSION.sub("", _UNSAFE_CHARS.sub("_", filename))
    return f"{clean_filename}_{timestamp}_{_random_token()}"


def format_megabytes(size: int) -> str:
    # 5242880 -> "5", 1572864 -> "1.5"
    return f"{size / MB:g}"
