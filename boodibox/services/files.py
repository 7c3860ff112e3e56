"""
File Service - Single Responsibility: turn file inputs into multipart parts.

Reads local files off the event loop and resolves filename + content type.
"""
from __future__ import annotations

import asyncio
import logging
import mimetypes
import os
from pathlib import Path
from typing import Any, Mapping, Optional

from ..errors import ValidationError
from ..models import BufferFile, FileInput, HandleFile, PathFile, ResolvedFile
from ..protocols import IFileReader

logger = logging.getLogger(__name__)

FALLBACK_CONTENT_TYPE = "application/octet-stream"
_FILE_KEYS = ("path", "buffer", "file")
_IMAGE_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "webp": "image/webp",
    "gif": "image/gif",
}


class LocalFileReader:
    """Reads files from the local file system. Implements IFileReader."""

    async def read_bytes(self, path: Path) -> bytes:
        # Run in thread pool to avoid blocking the event loop
        return await asyncio.to_thread(Path(path).read_bytes)


def guess_content_type(filename: Optional[str]) -> Optional[str]:
    """Guess a MIME type from the filename extension."""
    if not filename:
        return None
    extension = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
    if extension in _IMAGE_TYPES:
        return _IMAGE_TYPES[extension]
    content_type, _ = mimetypes.guess_type(filename, strict=False)
    return content_type


def coerce_file_input(item: Any) -> FileInput:
    """
    Accept a FileInput or a mapping with exactly one of path/buffer/file.

    Raises:
        ValidationError: item supplies none, or more than one, of the three forms
    """
    if isinstance(item, (PathFile, BufferFile, HandleFile)):
        return item
    if isinstance(item, (str, os.PathLike)):
        return PathFile(Path(item))
    if not isinstance(item, Mapping):
        raise ValidationError("each file must contain either path, buffer, or file")

    present = [key for key in _FILE_KEYS if item.get(key) is not None]
    if len(present) != 1:
        raise ValidationError("each file must contain exactly one of path, buffer, or file")

    filename = item.get("filename")
    content_type = item.get("contentType") or item.get("content_type")
    kind = present[0]
    if kind == "path":
        return PathFile(Path(item["path"]), filename=filename, content_type=content_type)
    if kind == "buffer":
        data = item["buffer"]
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise ValidationError("buffer must be bytes-like")
        return BufferFile(bytes(data), filename=filename or "file", content_type=content_type)
    return HandleFile(item["file"], filename=filename, content_type=content_type)


def _resolve_content_type(explicit: Optional[str], filename: str) -> str:
    return explicit or guess_content_type(filename) or FALLBACK_CONTENT_TYPE


async def resolve_file(item: FileInput, reader: IFileReader) -> ResolvedFile:
    """Load the bytes of one file input and pick its filename/content type."""
    if isinstance(item, PathFile):
        filename = item.filename or Path(item.path).name
        content = await reader.read_bytes(Path(item.path))
    elif isinstance(item, BufferFile):
        filename = item.filename or "file"
        content = bytes(item.data)
    elif isinstance(item, HandleFile):
        handle_name = getattr(item.handle, "name", None)
        filename = item.filename or (
            os.path.basename(handle_name) if isinstance(handle_name, str) else ""
        ) or "file"
        content = await asyncio.to_thread(item.handle.read)
    else:
        raise ValidationError("each file must contain either path, buffer, or file")

    resolved = ResolvedFile(
        filename=filename,
        content=content,
        content_type=_resolve_content_type(item.content_type, filename),
    )
    logger.debug(f"Resolved {resolved.filename} ({resolved.content_type}, {len(content)} bytes)")
    return resolved
