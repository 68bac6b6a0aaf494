from ._errors import handle_errors
from ._logs import setup_logging
from ._request_spec import RequestSpec
from ._ssl_context import get_httpx_client_kwargs

__all__ = [
    "RequestSpec",
    "get_httpx_client_kwargs",
    "handle_errors",
    "setup_logging",
]
