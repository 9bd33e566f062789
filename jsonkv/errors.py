"""jsonkv error types."""


class JsonKVError(Exception):
    """Base class for all jsonkv errors."""


class NotFoundError(JsonKVError, KeyError):
    """Raised when a requested key is not in the store.

    Attributes:
        key: The key that was looked up.
    """

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(key)

    def __str__(self) -> str:
        return f"not found: {self.key!r}"


class CodecError(JsonKVError):
    """Raised when a value cannot be encoded to or decoded from JSON.

    The underlying codec failure is available as ``__cause__``.
    """


class SyncError(JsonKVError):
    """Raised when the backing file could not be written.

    The underlying ``OSError`` is available as ``__cause__``.
    """


class InvalidContentError(JsonKVError):
    """Raised by ``open()`` when the backing file is not a JSON object.

    No store is constructed and nothing is salvaged from the file.
    """
