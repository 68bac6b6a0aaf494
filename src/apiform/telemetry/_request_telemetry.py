import queue
import time
from datetime import timedelta
from logging import getLogger
from typing import Awaitable, Callable, Mapping, Optional, Union

from httpx import Headers, Request, Response

from .._config import Config
from .._utils.constants import (
    HEADER_CLIENT_TELEMETRY,
    HEADER_REQUEST_ID,
    MAX_REQUEST_METRICS_QUEUE_SIZE,
)
from ..models.telemetry import ClientTelemetryPayload, RequestMetrics

logger = getLogger("apiform")

HeadersLike = Union[Headers, Mapping[str, str]]


class RequestTelemetry:
    """Samples request durations and reports them on later requests.

    Each completed request that carries a ``Request-Id`` leaves a
    :class:`RequestMetrics` record in a bounded FIFO queue; the next outgoing
    request takes at most one record and sends it in the
    ``X-Client-Telemetry`` header. When the queue is full new samples are
    dropped and the older ones kept.

    One instance is shared by every request of a client and is safe to use
    from several threads or tasks at once. ``config.enable_telemetry`` is read
    on every call.
    """

    def __init__(
        self, config: Config, max_queue_size: int = MAX_REQUEST_METRICS_QUEUE_SIZE
    ) -> None:
        self._config = config
        self._prev_request_metrics: "queue.Queue[RequestMetrics]" = queue.Queue(
            maxsize=max_queue_size
        )

    @property
    def enabled(self) -> bool:
        return self._config.enable_telemetry

    @property
    def pending(self) -> int:
        """Number of sampled records waiting to be sent."""
        return self._prev_request_metrics.qsize()

    def get_header_value(self, headers: Optional[HeadersLike] = None) -> Optional[str]:
        """Return the telemetry header value for an outgoing request.

        Returns ``None`` when the request already sets the header, when
        telemetry is disabled, or when no sample is available. Otherwise one
        sample is taken off the queue.
        """
        if headers is not None and HEADER_CLIENT_TELEMETRY in Headers(headers):
            return None

        if not self.enabled:
            return None

        try:
            request_metrics = self._prev_request_metrics.get_nowait()
        except queue.Empty:
            return None

        try:
            payload = ClientTelemetryPayload(last_request_metrics=request_metrics)
            return payload.model_dump_json()
        except Exception as e:
            logger.debug(f"Error serializing request telemetry: {e}")
            return None

    def maybe_enqueue_metrics(self, response: Response, duration: timedelta) -> None:
        """Record the duration of a completed request, if possible.

        Nothing is recorded when telemetry is disabled, the response has no
        request id, or the queue is full.
        """
        if not self.enabled:
            return

        request_id = response.headers.get(HEADER_REQUEST_ID)
        if not request_id:
            return

        metrics = RequestMetrics(
            request_id=request_id,
            request_duration_ms=duration // timedelta(milliseconds=1),
        )
        try:
            self._prev_request_metrics.put_nowait(metrics)
        except queue.Full:
            logger.debug(f"Request telemetry queue full, dropping {request_id}")

    def _attach_header(self, request: Request) -> None:
        header_value = self.get_header_value(request.headers)
        if header_value is not None:
            request.headers[HEADER_CLIENT_TELEMETRY] = header_value
            logger.debug(f"{HEADER_CLIENT_TELEMETRY}: {header_value}")

    def send_with_telemetry(
        self, request: Request, send: Callable[[Request], Response]
    ) -> Response:
        """Send ``request`` through ``send`` with telemetry bookkeeping.

        Adds the telemetry header when a sample is available, times the call
        and records the response. Exceptions from ``send`` propagate and
        nothing is recorded for them.
        """
        self._attach_header(request)

        start = time.perf_counter()
        response = send(request)
        elapsed = timedelta(seconds=time.perf_counter() - start)

        self.maybe_enqueue_metrics(response, elapsed)
        return response

    async def send_with_telemetry_async(
        self, request: Request, send: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        """Async version of :meth:`send_with_telemetry`."""
        self._attach_header(request)

        start = time.perf_counter()
        response = await send(request)
        elapsed = timedelta(seconds=time.perf_counter() - start)

        self.maybe_enqueue_metrics(response, elapsed)
        return response
