from pydantic import BaseModel, ConfigDict


class RequestMetrics(BaseModel):
    """Timing of a completed request, keyed by the server's request id."""

    model_config = ConfigDict(frozen=True)

    request_id: str
    request_duration_ms: int


class ClientTelemetryPayload(BaseModel):
    """Body of the client telemetry header."""

    model_config = ConfigDict(frozen=True)

    last_request_metrics: RequestMetrics
