import json
import threading
from datetime import timedelta
from unittest.mock import Mock, patch

import httpx
import pytest

from apiform._config import Config
from apiform.telemetry import RequestTelemetry

HEADER = "X-Client-Telemetry"


def make_response(request_id: str | None = "req_123") -> httpx.Response:
    headers = {"Request-Id": request_id} if request_id else {}
    return httpx.Response(200, headers=headers)


def make_request(headers: dict[str, str] | None = None) -> httpx.Request:
    return httpx.Request("GET", "https://api.example.com/v1/charges", headers=headers)


class TestRequestTelemetry:
    class TestGetHeaderValue:
        def test_empty_queue(self, telemetry: RequestTelemetry) -> None:
            assert telemetry.get_header_value({}) is None

        def test_payload_shape(self, telemetry: RequestTelemetry) -> None:
            telemetry.maybe_enqueue_metrics(
                make_response("req_123"), timedelta(milliseconds=42)
            )

            value = telemetry.get_header_value({})

            assert value == (
                '{"last_request_metrics":'
                '{"request_id":"req_123","request_duration_ms":42}}'
            )

        def test_returns_once_per_record(self, telemetry: RequestTelemetry) -> None:
            telemetry.maybe_enqueue_metrics(make_response(), timedelta(seconds=1))

            assert telemetry.get_header_value({}) is not None
            assert telemetry.get_header_value({}) is None

        def test_fifo_order(self, telemetry: RequestTelemetry) -> None:
            for i in range(3):
                telemetry.maybe_enqueue_metrics(
                    make_response(f"req_{i}"), timedelta(milliseconds=i)
                )

            ids = [
                json.loads(telemetry.get_header_value({}) or "")[
                    "last_request_metrics"
                ]["request_id"]
                for _ in range(3)
            ]
            assert ids == ["req_0", "req_1", "req_2"]

        def test_existing_header_suppresses_and_keeps_record(
            self, telemetry: RequestTelemetry
        ) -> None:
            telemetry.maybe_enqueue_metrics(make_response(), timedelta(seconds=1))

            assert telemetry.get_header_value({HEADER: "custom"}) is None
            assert telemetry.get_header_value({HEADER.lower(): "custom"}) is None
            assert telemetry.pending == 1

        def test_disabled(self, config: Config, telemetry: RequestTelemetry) -> None:
            telemetry.maybe_enqueue_metrics(make_response(), timedelta(seconds=1))
            config.enable_telemetry = False

            assert telemetry.get_header_value({}) is None

            config.enable_telemetry = True
            assert telemetry.get_header_value({}) is not None

        def test_serialization_failure_is_swallowed(
            self, telemetry: RequestTelemetry
        ) -> None:
            telemetry.maybe_enqueue_metrics(make_response(), timedelta(seconds=1))

            with patch(
                "apiform.telemetry._request_telemetry.ClientTelemetryPayload",
                side_effect=RuntimeError("boom"),
            ):
                assert telemetry.get_header_value({}) is None

    class TestMaybeEnqueueMetrics:
        def test_duration_in_milliseconds(self, telemetry: RequestTelemetry) -> None:
            telemetry.maybe_enqueue_metrics(
                make_response(), timedelta(seconds=1, microseconds=234_567)
            )

            payload = json.loads(telemetry.get_header_value({}) or "")
            assert payload["last_request_metrics"]["request_duration_ms"] == 1234

        def test_no_request_id(self, telemetry: RequestTelemetry) -> None:
            telemetry.maybe_enqueue_metrics(make_response(None), timedelta(seconds=1))

            assert telemetry.pending == 0

        def test_disabled(self, config: Config, telemetry: RequestTelemetry) -> None:
            config.enable_telemetry = False

            telemetry.maybe_enqueue_metrics(make_response(), timedelta(seconds=1))

            assert telemetry.pending == 0

        def test_full_queue_drops_new_records(
            self, telemetry: RequestTelemetry
        ) -> None:
            for i in range(150):
                telemetry.maybe_enqueue_metrics(
                    make_response(f"req_{i}"), timedelta(milliseconds=1)
                )

            assert telemetry.pending == 100

            first = json.loads(telemetry.get_header_value({}) or "")
            assert first["last_request_metrics"]["request_id"] == "req_0"

        def test_concurrent_burst(self, telemetry: RequestTelemetry) -> None:
            barrier = threading.Barrier(8)

            def record(worker: int) -> None:
                barrier.wait()
                for i in range(50):
                    telemetry.maybe_enqueue_metrics(
                        make_response(f"req_{worker}_{i}"), timedelta(milliseconds=1)
                    )

            threads = [threading.Thread(target=record, args=(w,)) for w in range(8)]
            for t in threads:
                t.start()
            for t in threads:
                t.join()

            assert telemetry.pending == 100

        def test_concurrent_consumers_never_share_a_record(
            self, telemetry: RequestTelemetry
        ) -> None:
            for i in range(100):
                telemetry.maybe_enqueue_metrics(
                    make_response(f"req_{i}"), timedelta(milliseconds=1)
                )

            seen: list[str] = []
            lock = threading.Lock()

            def consume() -> None:
                while True:
                    value = telemetry.get_header_value({})
                    if value is None:
                        return
                    with lock:
                        seen.append(value)

            threads = [threading.Thread(target=consume) for _ in range(8)]
            for t in threads:
                t.start()
            for t in threads:
                t.join()

            assert len(seen) == 100
            assert len(set(seen)) == 100

    class TestSendWithTelemetry:
        def test_first_request_has_no_header(
            self, telemetry: RequestTelemetry
        ) -> None:
            send = Mock(return_value=make_response("req_1"))

            response = telemetry.send_with_telemetry(make_request(), send)

            sent_request = send.call_args.args[0]
            assert HEADER not in sent_request.headers
            assert response is send.return_value
            assert telemetry.pending == 1

        def test_next_request_carries_previous_metrics(
            self, telemetry: RequestTelemetry
        ) -> None:
            send = Mock(side_effect=[make_response("req_1"), make_response("req_2")])

            telemetry.send_with_telemetry(make_request(), send)
            telemetry.send_with_telemetry(make_request(), send)

            second_request = send.call_args_list[1].args[0]
            payload = json.loads(second_request.headers[HEADER])
            assert payload["last_request_metrics"]["request_id"] == "req_1"
            assert isinstance(
                payload["last_request_metrics"]["request_duration_ms"], int
            )
            assert telemetry.pending == 1

        def test_caller_header_is_kept(self, telemetry: RequestTelemetry) -> None:
            telemetry.maybe_enqueue_metrics(make_response(), timedelta(seconds=1))
            send = Mock(return_value=make_response(None))

            telemetry.send_with_telemetry(make_request({HEADER: "opt-out"}), send)

            assert send.call_args.args[0].headers[HEADER] == "opt-out"
            assert telemetry.pending == 1

        def test_send_failure_propagates(self, telemetry: RequestTelemetry) -> None:
            send = Mock(side_effect=httpx.ConnectError("refused"))

            with pytest.raises(httpx.ConnectError):
                telemetry.send_with_telemetry(make_request(), send)

            assert telemetry.pending == 0

        @pytest.mark.anyio
        async def test_async(self, telemetry: RequestTelemetry) -> None:
            responses = iter([make_response("req_1"), make_response("req_2")])
            sent: list[httpx.Request] = []

            async def send(request: httpx.Request) -> httpx.Response:
                sent.append(request)
                return next(responses)

            await telemetry.send_with_telemetry_async(make_request(), send)
            await telemetry.send_with_telemetry_async(make_request(), send)

            assert HEADER not in sent[0].headers
            assert "req_1" in sent[1].headers[HEADER]
