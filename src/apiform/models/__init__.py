from .errors import (
    ApiError,
    ApiFormError,
    BaseUrlMissingError,
    EncodingError,
    MalformedParametersError,
)
from .telemetry import ClientTelemetryPayload, RequestMetrics

__all__ = [
    "ApiError",
    "ApiFormError",
    "BaseUrlMissingError",
    "ClientTelemetryPayload",
    "EncodingError",
    "MalformedParametersError",
    "RequestMetrics",
]
