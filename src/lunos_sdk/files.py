"""File helpers for binary payloads (audio, images, transcription input)."""

from __future__ import annotations

import base64
import binascii
from pathlib import Path
from typing import Union

from .errors import LunosError

PathLike = Union[str, Path]

MIME_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
    "mp3": "audio/mpeg",
    "wav": "audio/wav",
    "ogg": "audio/ogg",
    "opus": "audio/opus",
    "aac": "audio/aac",
    "flac": "audio/flac",
    "mp4": "video/mp4",
    "avi": "video/x-msvideo",
    "pdf": "application/pdf",
    "txt": "text/plain",
    "json": "application/json",
}

CONTENT_TYPE_EXTENSIONS = {
    "audio/mpeg": "mp3",
    "audio/mp3": "mp3",
    "audio/opus": "opus",
    "audio/ogg": "ogg",
    "audio/aac": "aac",
    "audio/flac": "flac",
    "audio/wav": "wav",
    "audio/x-wav": "wav",
    "video/mp4": "mp4",
    "image/png": "png",
    "image/jpeg": "jpg",
}


def save_buffer_to_file(buffer: bytes, path: PathLike) -> Path:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(buffer)
    return target


def read_file_as_buffer(path: PathLike) -> bytes:
    return Path(path).read_bytes()


def buffer_to_base64(buffer: bytes) -> str:
    return base64.b64encode(buffer).decode("ascii")


def base64_to_buffer(data: str) -> bytes:
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise LunosError.validation("Invalid base64 data") from exc


def file_to_base64(path: PathLike) -> str:
    return buffer_to_base64(read_file_as_buffer(path))


def get_file_extension(path: PathLike) -> str:
    return Path(path).suffix.lstrip(".")


def get_mime_type(path: PathLike) -> str:
    return MIME_TYPES.get(get_file_extension(path).lower(), "application/octet-stream")


def extension_for_content_type(content_type: str) -> str:
    media_type = content_type.split(";", 1)[0].strip().lower()
    return CONTENT_TYPE_EXTENSIONS.get(media_type, "bin")


__all__ = [
    "base64_to_buffer",
    "buffer_to_base64",
    "extension_for_content_type",
    "file_to_base64",
    "get_file_extension",
    "get_mime_type",
    "read_file_as_buffer",
    "save_buffer_to_file",
]
