"""Form encoding and request telemetry for HTTP API clients."""

from ._client import ApiClient
from ._config import Config
from ._encoding import (
    BinaryPayload,
    HttpContent,
    KeyValuePair,
    create_http_content,
    create_query_string,
    flatten_params,
)
from .models.errors import (
    ApiError,
    ApiFormError,
    BaseUrlMissingError,
    EncodingError,
    MalformedParametersError,
)
from .telemetry import RequestTelemetry

__all__ = [
    "ApiClient",
    "ApiError",
    "ApiFormError",
    "BaseUrlMissingError",
    "BinaryPayload",
    "Config",
    "EncodingError",
    "HttpContent",
    "KeyValuePair",
    "MalformedParametersError",
    "RequestTelemetry",
    "create_http_content",
    "create_query_string",
    "flatten_params",
]
