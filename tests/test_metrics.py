"""Tests for the CloudWatch metrics client."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

from src.services.metrics import MetricsClient


def _dims(datum: dict) -> dict[str, str]:
    return {d["Name"]: d["Value"] for d in datum["Dimensions"]}


class TestMetricsRecording:
    """Verify that the record_* methods buffer the right data."""

    def _make_client(self, *, enabled: bool = False) -> MetricsClient:
        with patch.dict("os.environ", {"METRICS_ENABLED": str(enabled).lower()}):
            return MetricsClient()

    def test_model_success_uses_model_family(self):
        client = self._make_client()
        client.record_success("anthropic", "llm_invoke", latency_ms=812.0)
        names = {m["MetricName"] for m in client._buffer}
        assert names == {"Model/RequestCount", "Model/Latency"}

    def test_tool_failure_appends_count_and_error(self):
        client = self._make_client()
        client.record_failure("tools", "createBooking", error_type="ArgumentParseError")
        names = {m["MetricName"] for m in client._buffer}
        assert names == {"Tools/RequestCount", "Tools/ErrorCount"}
        error = next(m for m in client._buffer if m["MetricName"] == "Tools/ErrorCount")
        assert _dims(error) == {"Operation": "createBooking", "ErrorType": "ArgumentParseError"}

    def test_failure_with_latency_appends_three_data_points(self):
        client = self._make_client()
        client.record_failure("anthropic", "llm_invoke", error_type="APITimeoutError", latency_ms=5000.0)
        assert len(client._buffer) == 3

    def test_success_dimensions_include_status(self):
        client = self._make_client()
        client.record_success("tools", "getAvailability", latency_ms=0.4)
        count = next(m for m in client._buffer if m["MetricName"] == "Tools/RequestCount")
        assert _dims(count) == {"Operation": "getAvailability", "Status": "success"}

    def test_record_chat(self):
        client = self._make_client()
        client.record_chat("round_limit", rounds=8, tool_calls=7)
        by_name = {m["MetricName"]: m for m in client._buffer}
        assert by_name["Chat/Rounds"]["Value"] == 8
        assert by_name["Chat/ToolCalls"]["Value"] == 7
        assert _dims(by_name["Chat/RequestCount"]) == {"Outcome": "round_limit"}

    def test_record_chat_skips_unknown_counts(self):
        client = self._make_client()
        client.record_chat("error", rounds=None, tool_calls=None)
        names = [m["MetricName"] for m in client._buffer]
        assert names == ["Chat/RequestCount"]

    def test_record_chat_keeps_known_rounds(self):
        client = self._make_client()
        client.record_chat("round_limit", rounds=8, tool_calls=None)
        names = {m["MetricName"] for m in client._buffer}
        assert names == {"Chat/RequestCount", "Chat/Rounds"}


class TestMetricsFlush:
    """Verify flush behaviour with and without CloudWatch enabled."""

    def test_flush_when_disabled_sends_nothing_and_clears(self):
        with patch.dict("os.environ", {"METRICS_ENABLED": "false"}):
            client = MetricsClient()
        client.record_success("tools", "sendMessage", latency_ms=1.0)
        assert client.flush() == 0
        assert client._buffer == []

    def test_flush_when_enabled_calls_put_metric_data(self):
        with patch.dict("os.environ", {"METRICS_ENABLED": "true"}), \
                patch.object(MetricsClient, "_start_flush_thread"):
            client = MetricsClient()

        mock_cw = MagicMock()
        client._cw_client = mock_cw

        client.record_chat("ok", rounds=2, tool_calls=1)
        sent = client.flush()

        assert sent == 3
        kwargs = mock_cw.put_metric_data.call_args[1]
        assert kwargs["Namespace"] == "TerminPilot"
        assert len(kwargs["MetricData"]) == 3

    def test_flush_errors_are_logged_not_raised(self):
        with patch.dict("os.environ", {"METRICS_ENABLED": "true"}), \
                patch.object(MetricsClient, "_start_flush_thread"):
            client = MetricsClient()
        client._cw_client = MagicMock()
        client._cw_client.put_metric_data.side_effect = RuntimeError("throttled")

        client.record_success("anthropic", "llm_invoke", latency_ms=10.0)
        assert client.flush() == 0

    def test_flush_empty_buffer_returns_zero(self):
        with patch.dict("os.environ", {"METRICS_ENABLED": "false"}):
            client = MetricsClient()
        assert client.flush() == 0
