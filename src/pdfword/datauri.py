"""Helpers for ``data:`` URIs and local source references."""

import base64
import binascii
from pathlib import Path
from urllib.parse import unquote, urlparse

from pdfword.errors import SourceError


def encode_data_uri(data: bytes, media_type: str) -> str:
    """Embed bytes in a base64 ``data:`` URI."""
    return f"data:{media_type};base64,{base64.b64encode(data).decode('ascii')}"


def decode_data_uri(uri: str) -> tuple[str, bytes]:
    """Split a ``data:`` URI into (media_type, payload bytes)."""
    if not uri.startswith("data:") or "," not in uri:
        raise SourceError("Not a data URI")

    header, payload = uri[5:].split(",", 1)
    params = header.split(";")
    media_type = params[0] or "text/plain"

    if "base64" in params[1:]:
        try:
            return media_type, base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise SourceError(f"Invalid base64 payload in data URI: {exc}") from exc
    return media_type, unquote(payload).encode("utf-8")


def read_source(uri: str) -> bytes:
    """Resolve a source reference to bytes.

    Accepts a ``data:`` URI, a ``file://`` URI or a plain filesystem path.
    """
    if uri.startswith("data:"):
        return decode_data_uri(uri)[1]

    if uri.startswith("file://"):
        path = Path(unquote(urlparse(uri).path))
    else:
        path = Path(uri)

    try:
        if not path.is_file():
            raise SourceError(f"Source not found: {uri[:120]}")
        return path.read_bytes()
    except OSError as exc:
        raise SourceError(f"Cannot read source {uri[:120]}: {exc.strerror or exc}") from exc
