"""Codecs: encode/decode between values and JSON payload bytes."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Callable


@dataclass(frozen=True)
class Codec:
    """A value codec.

    ``encode`` must return the UTF-8 bytes of a single JSON value, since
    payloads are embedded verbatim in the backing document. Both callables
    signal failure by raising ``TypeError`` or ``ValueError``.
    """

    encode: Callable[[Any], bytes]
    decode: Callable[[bytes], Any]


def dumps(value: Any, **kwargs: Any) -> bytes:
    """Compact strict-JSON encoding used for payloads and the document."""
    return json.dumps(
        value,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
        **kwargs,
    ).encode("utf-8")


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


# Strict decoder for validating payloads: rejects NaN and Infinity.
decoder = json.JSONDecoder(parse_constant=_reject_constant)


def loads(raw: bytes) -> Any:
    return decoder.decode(raw.decode("utf-8"))


def json_codec(
    *,
    sort_keys: bool = False,
    default: Callable[[Any], Any] | None = None,
    object_hook: Callable[[dict[str, Any]], Any] | None = None,
) -> Codec:
    """JSON codec with optional hooks for host types.

    Args:
        sort_keys: Sort object keys when encoding.
        default: Called for objects ``json`` cannot serialize; should
            return a serializable replacement or raise ``TypeError``.
        object_hook: Called with every decoded JSON object; its return
            value replaces the dict.
    """

    def encode(val: Any) -> bytes:
        return dumps(val, sort_keys=sort_keys, default=default)

    def decode(raw: bytes) -> Any:
        return json.loads(raw.decode("utf-8"), object_hook=object_hook)

    return Codec(encode=encode, decode=decode)
