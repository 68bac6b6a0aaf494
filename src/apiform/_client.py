from logging import getLogger
from os import environ as env
from typing import Any, Optional

from dotenv import load_dotenv
from httpx import Response

from ._config import Config
from ._services import ApiService
from ._utils._logs import setup_logging
from ._utils.constants import (
    ENV_API_KEY,
    ENV_BASE_URL,
    ENV_CA_BUNDLE,
    ENV_ENABLE_TELEMETRY,
)
from .models.errors import BaseUrlMissingError
from .telemetry import RequestTelemetry

load_dotenv()


def _parse_env_flag(raw: Optional[str]) -> Optional[bool]:
    if raw is None:
        return None
    return raw.strip().lower() not in ("false", "0", "no", "off")


class ApiClient:
    """Entry point of the client.

    Owns the configuration, the request telemetry sampler shared by all of its
    requests, and the HTTP service. Arguments left out are read from the
    environment (``APIFORM_URL``, ``APIFORM_API_KEY``,
    ``APIFORM_ENABLE_TELEMETRY``, ``APIFORM_CA_BUNDLE``), including a ``.env``
    file.
    """

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        secret: Optional[str] = None,
        enable_telemetry: Optional[bool] = None,
        debug: bool = False,
        ca_bundle: Optional[str] = None,
    ) -> None:
        base_url_value = base_url or env.get(ENV_BASE_URL)
        if not base_url_value:
            raise BaseUrlMissingError()

        secret_value = secret or env.get(ENV_API_KEY)

        if enable_telemetry is None:
            enable_telemetry = _parse_env_flag(env.get(ENV_ENABLE_TELEMETRY))

        self._config = Config(
            base_url=base_url_value,
            secret=secret_value,
            enable_telemetry=True if enable_telemetry is None else enable_telemetry,
            debug=debug,
            ca_bundle=ca_bundle or env.get(ENV_CA_BUNDLE),
        )

        setup_logging(self._config.debug)
        log = getLogger("apiform")

        log.debug("CONFIG:")
        log.debug(f"{self._config.model_dump(exclude={'secret'})}\n")

        self._telemetry = RequestTelemetry(self._config)
        self._service = ApiService(self._config, self._telemetry)

    @property
    def config(self) -> Config:
        return self._config

    @property
    def telemetry(self) -> RequestTelemetry:
        return self._telemetry

    @property
    def service(self) -> ApiService:
        return self._service

    def request(self, method: str, url: str, **kwargs: Any) -> Response:
        return self._service.request(method, url, **kwargs)

    async def request_async(self, method: str, url: str, **kwargs: Any) -> Response:
        return await self._service.request_async(method, url, **kwargs)

    def close(self) -> None:
        self._service.close()

    async def aclose(self) -> None:
        await self._service.aclose()

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
