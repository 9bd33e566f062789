"""Backing-file I/O for the JSON document."""

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Mapping
from contextlib import suppress
from pathlib import Path

from .codec import decoder, dumps, loads
from .errors import InvalidContentError

logger = logging.getLogger(__name__)

FILE_MODE = 0o755
EMPTY_DOCUMENT = b"{}"

_WHITESPACE = " \t\n\r"


def read(path: Path) -> dict[str, bytes]:
    """Open or create the file at ``path`` and return its entries.

    A missing file, or one holding only whitespace, is (re)written as
    the empty document. ``OSError`` propagates unchanged.
    """
    fd = os.open(path, os.O_RDWR | os.O_CREAT, FILE_MODE)
    with os.fdopen(fd, "r+b") as f:
        content = f.read()
        if not content.strip():
            logger.debug("bootstrapping empty document at %s", path)
            f.seek(0)
            f.truncate()
            f.write(EMPTY_DOCUMENT)
            content = EMPTY_DOCUMENT
    return parse(content)


def parse(content: bytes) -> dict[str, bytes]:
    """Split a document into per-key payloads.

    Each payload is the value's text exactly as it appears in the
    document, so numbers keep their original precision.
    """
    try:
        return _split(content.decode("utf-8"))
    except ValueError as exc:
        raise InvalidContentError("db content is not valid JSON") from exc


def _skip(text: str, idx: int) -> int:
    while idx < len(text) and text[idx] in _WHITESPACE:
        idx += 1
    return idx


def _expect(text: str, idx: int, char: str) -> int:
    if text[idx : idx + 1] != char:
        raise ValueError(f"expected {char!r} at offset {idx}")
    return _skip(text, idx + 1)


def _split(text: str) -> dict[str, bytes]:
    entries: dict[str, bytes] = {}
    idx = _expect(text, _skip(text, 0), "{")
    if text[idx : idx + 1] == "}":
        idx += 1
    else:
        while True:
            if text[idx : idx + 1] != '"':
                raise ValueError(f"expected a key at offset {idx}")
            key, idx = decoder.raw_decode(text, idx)
            start = _expect(text, _skip(text, idx), ":")
            _, end = decoder.raw_decode(text, start)
            entries[key] = text[start:end].encode("utf-8")
            idx = _skip(text, end)
            if text[idx : idx + 1] == "}":
                idx += 1
                break
            idx = _expect(text, idx, ",")
    if _skip(text, idx) != len(text):
        raise ValueError(f"extra data at offset {idx}")
    return entries


def render(entries: Mapping[str, bytes]) -> bytes:
    """Serialize entries as one document, embedding payloads verbatim.

    Raises ``ValueError`` if any payload is not valid JSON.
    """
    parts = []
    for key, raw in entries.items():
        loads(raw)
        parts.append(dumps(key) + b":" + raw)
    return b"{" + b",".join(parts) + b"}"


def write(path: Path, content: bytes, *, atomic: bool = False) -> None:
    """Overwrite ``path`` with ``content`` in full.

    With ``atomic``, the content goes to a temporary file in the same
    directory which then replaces ``path``, so readers never observe a
    truncated file.
    """
    if not atomic:
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, FILE_MODE)
        with os.fdopen(fd, "wb") as f:
            f.write(content)
        return

    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp, FILE_MODE)
        os.replace(tmp, path)
    except BaseException:
        with suppress(FileNotFoundError):
            os.unlink(tmp)
        raise
