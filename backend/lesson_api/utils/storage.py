"""Disk storage for uploaded avatars."""

from __future__ import annotations

import io
import logging
import time
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from ..errors import validation_failed

_LOGGER = logging.getLogger("lesson_api.storage")


def _is_image(payload: bytes) -> bool:
    try:
        Image.open(io.BytesIO(payload)).verify()
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError):
        return False
    return True


def avatar_file_name(filename: str, now_ms: int | None = None) -> str:
    """Build `<epoch millis><extension>`, keeping the client's extension."""
    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"{stamp}{Path(filename or '').suffix.lower()}"


def store_avatar(payload: bytes, filename: str, upload_dir: Path, max_bytes: int) -> str:
    """Validate and write an avatar image, returning the stored file name."""
    if not payload:
        raise validation_failed({"avatar": "file is empty"})
    if len(payload) > max_bytes:
        raise validation_failed({"avatar": f"file exceeds {max_bytes} bytes"})
    if not _is_image(payload):
        raise validation_failed({"avatar": "file is not a supported image"})
    upload_dir.mkdir(parents=True, exist_ok=True)
    name = avatar_file_name(filename)
    target = upload_dir / name
    # two uploads in the same millisecond would collide
    while target.exists():
        name = avatar_file_name(filename, int(name.split(".")[0]) + 1)
        target = upload_dir / name
    target.write_bytes(payload)
    _LOGGER.info("avatar_stored name=%s bytes=%d", name, len(payload))
    return name


def public_upload_url(base_url: str, name: str) -> str:
    """Join the server base URL with the static `/uploads` mount."""
    return f"{base_url.rstrip('/')}/uploads/{name}"


def remove_upload(upload_dir: Path, name: str) -> None:
    """Delete a stored upload; a file that is already gone is ignored."""
    (upload_dir / name).unlink(missing_ok=True)
    _LOGGER.info("upload_removed name=%s", name)
