"""Request telemetry.

Durations of completed requests are reported to the API on subsequent
requests through the ``X-Client-Telemetry`` header.
"""

from ._request_telemetry import RequestTelemetry

__all__ = ["RequestTelemetry"]
