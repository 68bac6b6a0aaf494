import ssl
from typing import TYPE_CHECKING, Any, Optional

import certifi
import truststore

if TYPE_CHECKING:
    from .._config import Config


def create_ssl_context(
    ca_bundle: Optional[str] = None, use_system_trust_store: bool = True
) -> ssl.SSLContext:
    """Build the TLS context used to verify the API's certificate.

    Args:
        ca_bundle: Path to a PEM bundle. Takes precedence over everything else.
        use_system_trust_store: Verify against the operating system's trust
            store; when off, certifi's Mozilla bundle is used instead.
    """
    if ca_bundle:
        return ssl.create_default_context(cafile=ca_bundle)
    if use_system_trust_store:
        return truststore.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    return ssl.create_default_context(cafile=certifi.where())


def get_httpx_client_kwargs(config: "Config") -> dict[str, Any]:
    """Keyword arguments shared by the ``httpx.Client``/``httpx.AsyncClient``."""
    return {
        "verify": create_ssl_context(config.ca_bundle, config.use_system_trust_store),
        "timeout": config.timeout,
        "follow_redirects": True,
    }
