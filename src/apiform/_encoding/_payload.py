"""Binary payloads: named, readable byte sources for file fields.

Callers may pass any of the following as a parameter value and it will be
sent as a file in a ``multipart/form-data`` body:

* :class:`BinaryPayload`
* ``bytes``, ``bytearray`` or ``memoryview`` (in-memory, named ``blob``)
* an open file object (named after its ``name`` attribute, if any)
* a :class:`pathlib.PurePath` pointing at a file on disk

:func:`as_payload` turns any of these into a :class:`BinaryPayload` so the
multipart encoder only deals with one shape.
"""

import io
import os
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path, PurePath
from typing import IO, Any, Iterator, Optional, Union

from .._utils.constants import DEFAULT_BLOB_NAME

BinaryLike = Union[
    "BinaryPayload", bytes, bytearray, memoryview, io.IOBase, PurePath
]


@dataclass(frozen=True)
class BinaryPayload:
    """A named byte source.

    Exactly one of ``path``, ``stream`` or ``data`` is set. Files referenced by
    ``path`` are opened when the payload is read and closed right after;
    ``stream`` belongs to the caller and is never closed here.
    """

    name: Optional[str] = None
    path: Optional[Path] = None
    stream: Optional[IO[Any]] = None
    data: Optional[bytes] = None

    @classmethod
    def from_path(
        cls, path: Union[str, os.PathLike], name: Optional[str] = None
    ) -> "BinaryPayload":
        path = Path(path)
        return cls(name=name or path.name, path=path)

    @classmethod
    def from_stream(
        cls, stream: IO[Any], name: Optional[str] = None
    ) -> "BinaryPayload":
        return cls(name=name or _stream_name(stream), stream=stream)

    @classmethod
    def from_bytes(
        cls, data: Union[bytes, bytearray, memoryview], name: Optional[str] = None
    ) -> "BinaryPayload":
        return cls(name=name, data=bytes(data))

    @property
    def filename(self) -> str:
        return self.name or DEFAULT_BLOB_NAME

    @contextmanager
    def open(self) -> Iterator[IO[Any]]:
        """Yield a readable stream over the payload's bytes.

        A seekable caller stream is put back at its starting position on exit,
        so the same payload can be read again when a request is retried.
        """
        if self.path is not None:
            with open(self.path, "rb") as f:
                yield f
        elif self.stream is not None:
            start = self.stream.tell() if self.stream.seekable() else None
            try:
                yield self.stream
            finally:
                if start is not None and not self.stream.closed:
                    self.stream.seek(start)
        else:
            yield io.BytesIO(self.data or b"")


def _stream_name(stream: IO[Any]) -> Optional[str]:
    name = getattr(stream, "name", None)
    # file descriptors opened with open(fd) report an int name
    if isinstance(name, (str, bytes)) and name:
        return os.path.basename(os.fsdecode(name))
    return None


def is_binary(value: Any) -> bool:
    return isinstance(
        value, (BinaryPayload, bytes, bytearray, memoryview, io.IOBase, PurePath)
    )


def as_payload(value: BinaryLike) -> BinaryPayload:
    if isinstance(value, BinaryPayload):
        return value
    if isinstance(value, (bytes, bytearray, memoryview)):
        return BinaryPayload.from_bytes(value)
    if isinstance(value, PurePath):
        return BinaryPayload.from_path(value)
    if isinstance(value, io.IOBase):
        return BinaryPayload.from_stream(value)  # type: ignore[arg-type]
    raise TypeError(f"{type(value).__name__} is not a binary payload")
