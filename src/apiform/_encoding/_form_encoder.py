from logging import getLogger
from typing import Any, Iterable, List, Mapping, Optional
from urllib.parse import quote_plus

from .._utils.constants import CHARSET
from ..models.errors import EncodingError
from ._flatten import flatten_params
from ._http_content import HttpContent
from ._key_value_pair import KeyValuePair
from ._multipart import encode_multipart_form_data_content, new_boundary

logger = getLogger("apiform")


def url_encode(value: Optional[str], charset: str = CHARSET) -> str:
    """Form-encode a single key or value.

    Square brackets are put back as literals after encoding: the API accepts
    them and nested keys stay readable. ``None`` is written as ``null``.
    """
    if value is None:
        return "null"

    try:
        encoded = quote_plus(value, safe="*", encoding=charset)
    except LookupError as e:
        raise EncodingError(f"Unsupported charset: {charset}") from e
    except UnicodeError as e:
        raise EncodingError(f"Cannot encode {value!r} as {charset}") from e

    # quote_plus never escapes "~"; the form encoding the API expects does
    encoded = encoded.replace("~", "%7E")
    return encoded.replace("%5B", "[").replace("%5D", "]")


def encode_query_string(
    pairs: Optional[Iterable[KeyValuePair]], charset: str = CHARSET
) -> str:
    """Encode string pairs as ``key=value&key=value``."""
    if pairs is None:
        return ""

    return "&".join(
        f"{url_encode(key, charset)}={url_encode(value, charset)}"
        for key, value in pairs
    )


def encode_form_urlencoded_content(
    pairs: Iterable[KeyValuePair], charset: str = CHARSET
) -> HttpContent:
    return HttpContent.create_from_form_urlencoded(
        encode_query_string(pairs, charset), charset
    )


def _string_pairs(flat_params: Iterable[KeyValuePair]) -> List[KeyValuePair]:
    return [kvp for kvp in flat_params if isinstance(kvp.value, str)]


def create_http_content(
    params: Optional[Mapping[str, Any]], charset: str = CHARSET
) -> HttpContent:
    """Build the body of a request from its parameters.

    When every flattened value is a string the body is
    ``application/x-www-form-urlencoded``; a single binary payload anywhere in
    the parameters switches it to ``multipart/form-data``. Missing or empty
    parameters still produce a content type, with an empty body.

    Args:
        params: The request parameters, possibly nested.
        charset: Character set used for text in the body.

    Returns:
        HttpContent: The encoded body and its ``Content-Type`` value.

    Raises:
        MalformedParametersError: If the parameters contain a reference cycle.
        EncodingError: If the body cannot be encoded.
    """
    flat_params = flatten_params(params)

    if all(isinstance(kvp.value, str) for kvp in flat_params):
        content = encode_form_urlencoded_content(flat_params, charset)
    else:
        content = encode_multipart_form_data_content(
            flat_params, new_boundary(), charset
        )

    logger.debug(
        f"Encoded {len(flat_params)} parameter(s) as {content.content_type} "
        f"({len(content.byte_array_content)} bytes)"
    )
    return content


def create_query_string(
    params: Optional[Mapping[str, Any]], charset: str = CHARSET
) -> str:
    """Build a URL query string from request parameters.

    Binary payloads cannot travel in a URL and are left out silently.
    """
    if params is None:
        return ""

    return encode_query_string(_string_pairs(flatten_params(params)), charset)
