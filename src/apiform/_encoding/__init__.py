from ._flatten import flatten, flatten_params
from ._form_encoder import (
    create_http_content,
    create_query_string,
    encode_form_urlencoded_content,
    encode_query_string,
    url_encode,
)
from ._http_content import HttpContent
from ._key_value_pair import KeyValuePair
from ._multipart import (
    MultipartProcessor,
    encode_multipart_form_data_content,
    new_boundary,
)
from ._payload import BinaryPayload, as_payload, is_binary

__all__ = [
    "BinaryPayload",
    "HttpContent",
    "KeyValuePair",
    "MultipartProcessor",
    "as_payload",
    "create_http_content",
    "create_query_string",
    "encode_form_urlencoded_content",
    "encode_multipart_form_data_content",
    "encode_query_string",
    "flatten",
    "flatten_params",
    "is_binary",
    "new_boundary",
    "url_encode",
]
