"""jsonkv: embedded key-value store backed by a single JSON file.

Stores are opened with ``jsonkv.open(path, *options)``. ``open`` is left
out of ``__all__`` so a star import does not shadow the builtin.
"""

from .codec import Codec, json_codec
from .errors import (
    CodecError,
    InvalidContentError,
    JsonKVError,
    NotFoundError,
    SyncError,
)
from .lock import RWLock
from .store import Option, Store, open

__all__ = [
    "Codec",
    "CodecError",
    "InvalidContentError",
    "JsonKVError",
    "NotFoundError",
    "Option",
    "RWLock",
    "Store",
    "SyncError",
    "json_codec",
]
