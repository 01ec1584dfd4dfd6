"""Upload payloads and the checks run before any network call."""

from __future__ import annotations

import random
import string
import time
from dataclasses import dataclass

from property_editor.config import UploadConfig
from property_editor.exceptions import UploadError


@dataclass(frozen=True)
class UploadFile:
    """File selected for upload."""

    filename: str
    content: bytes
    content_type: str = ""

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def extension(self) -> str:
        _, dot, ext = self.filename.rpartition(".")
        return ext.lower() if dot else ""


def _check_size(file: UploadFile, config: UploadConfig, kind: str) -> None:
    if file.size == 0:
        raise UploadError(f"{file.filename} is empty", kind=kind)
    if file.size > config.max_bytes:
        limit_mb = config.max_bytes / (1024 * 1024)
        raise UploadError(f"{file.filename} exceeds the {limit_mb:g}MB limit", kind=kind)


def check_image(file: UploadFile, config: UploadConfig | None = None) -> None:
    """Reject images of the wrong type or size."""
    config = config or UploadConfig()
    if file.content_type not in config.image_types:
        raise UploadError(
            f"{file.filename}: unsupported image type {file.content_type or 'unknown'}", kind="image"
        )
    _check_size(file, config, "image")


def check_document(file: UploadFile, config: UploadConfig | None = None) -> None:
    """Reject documents of the wrong extension or size."""
    config = config or UploadConfig()
    if file.extension not in config.document_extensions:
        raise UploadError(
            f"{file.filename}: unsupported document type .{file.extension or '?'}", kind="document"
        )
    _check_size(file, config, "document")


def storage_name(
    file: UploadFile,
    property_id: str | None = None,
    now_ms: int | None = None,
    rng: random.Random | None = None,
) -> str:
    """Unique object name: ``{property}_{ms}.{ext}`` or ``{ms}_{random}.{ext}``."""
    now_ms = int(time.time() * 1000) if now_ms is None else now_ms
    ext = file.extension or "bin"
    if property_id:
        return f"{property_id}_{now_ms}.{ext}"
    rng = rng or random.Random()
    suffix = "".join(rng.choices(string.ascii_lowercase + string.digits, k=6))
    return f"{now_ms}_{suffix}.{ext}"
