import sys
from pathlib import Path

import pytest

# Ensure local source package (src/apiform) is importable before tests collect
_PROJECT_ROOT: Path = Path(__file__).resolve().parents[1]
_SRC_PATH: Path = _PROJECT_ROOT / "src"
if _SRC_PATH.exists():
    sys.path.insert(0, str(_SRC_PATH))

from apiform._config import Config  # noqa: E402
from apiform.telemetry import RequestTelemetry  # noqa: E402


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Clean environment variables before each test."""
    monkeypatch.delenv("APIFORM_URL", raising=False)
    monkeypatch.delenv("APIFORM_API_KEY", raising=False)
    monkeypatch.delenv("APIFORM_ENABLE_TELEMETRY", raising=False)
    monkeypatch.delenv("APIFORM_CA_BUNDLE", raising=False)


@pytest.fixture
def base_url() -> str:
    return "https://api.example.com"


@pytest.fixture
def secret() -> str:
    return "sk_test_secret"


@pytest.fixture
def config(base_url: str, secret: str) -> Config:
    return Config(base_url=base_url, secret=secret)


@pytest.fixture
def telemetry(config: Config) -> RequestTelemetry:
    return RequestTelemetry(config)
