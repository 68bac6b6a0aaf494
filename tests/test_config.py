import pytest
from pydantic import ValidationError

from apiform._config import Config


class TestConfig:
    def test_defaults(self) -> None:
        config = Config(base_url="https://api.example.com/")

        assert config.base_url == "https://api.example.com"
        assert config.secret is None
        assert config.enable_telemetry is True
        assert config.charset == "UTF-8"
        assert config.debug is False
        assert config.timeout == 30.0
        assert config.ca_bundle is None
        assert config.use_system_trust_store is True

    def test_rejects_non_http_url(self) -> None:
        with pytest.raises(ValidationError):
            Config(base_url="ftp://files.example.com")

    def test_is_mutable(self) -> None:
        config = Config(base_url="https://api.example.com")

        config.enable_telemetry = False

        assert config.enable_telemetry is False
