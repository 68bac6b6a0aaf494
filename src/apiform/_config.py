import os
from typing import Optional

from pydantic import BaseModel, HttpUrl, field_validator

from ._utils.constants import CHARSET


class Config(BaseModel):
    """Client configuration.

    The model is mutable: flipping ``enable_telemetry`` on a live client takes
    effect on the next request.
    """

    base_url: str
    secret: Optional[str] = None
    enable_telemetry: bool = True
    charset: str = CHARSET
    debug: bool = False
    timeout: float = 30.0
    ca_bundle: Optional[str] = None
    use_system_trust_store: bool = True

    @field_validator("base_url", mode="before")
    @classmethod
    def validate_url(cls, value: str) -> str:
        url_value = HttpUrl(url=value)
        assert url_value.scheme in ("http", "https"), "Invalid URL"
        return value.rstrip("/")

    @field_validator("ca_bundle")
    @classmethod
    def expand_ca_bundle(cls, value: Optional[str]) -> Optional[str]:
        if not value:
            return None
        return os.path.expanduser(os.path.expandvars(value))
