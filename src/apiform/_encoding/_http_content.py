from dataclasses import dataclass

from .._utils.constants import (
    CHARSET,
    CONTENT_TYPE_FORM_URLENCODED,
    CONTENT_TYPE_MULTIPART_FORM_DATA,
)


@dataclass(frozen=True)
class HttpContent:
    """The body of an HTTP request and the matching ``Content-Type`` value.

    The content type travels with the bytes because it can depend on them,
    e.g. the boundary token of a multipart body.
    """

    byte_array_content: bytes
    content_type: str

    def string_content(self, charset: str = CHARSET) -> str:
        return self.byte_array_content.decode(charset)

    @classmethod
    def create_from_form_urlencoded(
        cls, encoded_string: str, charset: str = CHARSET
    ) -> "HttpContent":
        return cls(
            byte_array_content=encoded_string.encode(charset),
            content_type=f"{CONTENT_TYPE_FORM_URLENCODED};charset={charset}",
        )

    @classmethod
    def create_from_multipart_form_data(
        cls, data: bytes, boundary: str
    ) -> "HttpContent":
        return cls(
            byte_array_content=data,
            content_type=f"{CONTENT_TYPE_MULTIPART_FORM_DATA}; boundary={boundary}",
        )
