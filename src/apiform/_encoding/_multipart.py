import codecs
import io
import mimetypes
import uuid
from typing import IO, Any, BinaryIO, Iterable

from .._utils.constants import CHARSET, CONTENT_TYPE_OCTET_STREAM
from ..models.errors import EncodingError
from ._http_content import HttpContent
from ._key_value_pair import KeyValuePair
from ._payload import as_payload, is_binary

LINE_BREAK = "\r\n"

_CHUNK_SIZE = 64 * 1024


def new_boundary() -> str:
    return str(uuid.uuid4())


def _escape_field_name(value: str) -> str:
    return value.replace('"', "%22").replace("\r", "%0D").replace("\n", "%0A")


class MultipartProcessor:
    """Writes a ``multipart/form-data`` body part by part.

    Every part starts with ``--<boundary>`` and a ``Content-Disposition``
    header; :meth:`finish` writes the closing ``--<boundary>--`` delimiter.
    """

    def __init__(self, output: BinaryIO, boundary: str, charset: str = CHARSET):
        try:
            codecs.lookup(charset)
        except LookupError as e:
            raise EncodingError(f"Unsupported charset: {charset}") from e

        self._output = output
        self._boundary = boundary
        self._charset = charset

    def _write(self, text: str) -> None:
        self._output.write(text.encode(self._charset))

    def _write_line(self, text: str = "") -> None:
        self._write(text + LINE_BREAK)

    def add_form_field(self, name: str, value: str) -> None:
        self._write_line(f"--{self._boundary}")
        self._write_line(
            f'Content-Disposition: form-data; name="{_escape_field_name(name)}"'
        )
        self._write_line()
        self._write_line(value)

    def add_file_field(self, name: str, filename: str, stream: IO[Any]) -> None:
        content_type = mimetypes.guess_type(filename)[0] or CONTENT_TYPE_OCTET_STREAM

        self._write_line(f"--{self._boundary}")
        self._write_line(
            f'Content-Disposition: form-data; name="{_escape_field_name(name)}"; '
            f'filename="{_escape_field_name(filename)}"'
        )
        self._write_line(f"Content-Type: {content_type}")
        self._write_line()

        while True:
            chunk = stream.read(_CHUNK_SIZE)
            if not chunk:
                break
            if isinstance(chunk, str):
                chunk = chunk.encode(self._charset)
            self._output.write(chunk)

        self._write_line()

    def finish(self) -> None:
        self._write_line(f"--{self._boundary}--")


def encode_multipart_form_data_content(
    pairs: Iterable[KeyValuePair], boundary: str, charset: str = CHARSET
) -> HttpContent:
    """Encode pairs as a ``multipart/form-data`` body.

    Binary values become file fields, everything else a form field. Files
    opened from a path are closed before returning, also when encoding fails.

    Raises:
        EncodingError: If the charset is unknown or a binary source cannot be
            read.
    """
    output = io.BytesIO()
    processor = MultipartProcessor(output, boundary, charset)

    try:
        for key, value in pairs:
            if is_binary(value):
                payload = as_payload(value)
                with payload.open() as stream:
                    processor.add_file_field(str(key), payload.filename, stream)
            else:
                processor.add_form_field(str(key), str(value))
        processor.finish()
    except EncodingError:
        raise
    except (OSError, UnicodeError) as e:
        raise EncodingError(f"Failed to encode multipart body: {e}") from e

    return HttpContent.create_from_multipart_form_data(output.getvalue(), boundary)
