"""CloudWatch custom metrics emitter with background batching.

Publishes three families of data points:

* **Model/...**   — one per language-model round (count, latency, errors)
* **Tools/...**   — one per tool dispatch, dimensioned by tool name
* **Chat/...**    — one per finished ``/chat`` request: outcome, rounds used
  and tool calls made

Data points are buffered in memory and flushed by a daemon thread every
``FLUSH_INTERVAL_SECONDS``.  Unless ``METRICS_ENABLED=true`` the buffer is
only logged at DEBUG level and discarded on flush.

Usage
-----
>>> from src.services.metrics import metrics
>>> metrics.record_success("anthropic", "llm_invoke", latency_ms=812.0)
>>> metrics.record_failure("tools", "createBooking", error_type="ArgumentParseError")
>>> metrics.record_chat("ok", rounds=2, tool_calls=1)
"""

from __future__ import annotations

import atexit
import logging
import os
import threading
import time
from datetime import UTC, datetime
from typing import Any

logger = logging.getLogger(__name__)

NAMESPACE = "TerminPilot"
FLUSH_INTERVAL_SECONDS = 60
MAX_BATCH_SIZE = 1_000  # CloudWatch API limit per PutMetricData call

# Service name → metric family prefix
_FAMILIES = {"anthropic": "Model", "tools": "Tools"}


def _family(service: str) -> str:
    return _FAMILIES.get(service, "External")


def _dims(**pairs: str) -> list[dict[str, str]]:
    return [{"Name": name, "Value": value} for name, value in pairs.items()]


class MetricsClient:
    """Batched CloudWatch metrics publisher."""

    def __init__(self) -> None:
        self._enabled = os.getenv("METRICS_ENABLED", "false").lower() == "true"
        self._buffer: list[dict[str, Any]] = []
        self._lock = threading.Lock()
        self._cw_client = None  # lazy-init

        if self._enabled:
            self._start_flush_thread()

    def _get_cw_client(self):
        """Create the boto3 CloudWatch client on first use."""
        if self._cw_client is None:
            import boto3

            self._cw_client = boto3.client("cloudwatch")
        return self._cw_client

    # ── Public API ────────────────────────────────────────────────────

    def record_success(self, service: str, operation: str, latency_ms: float) -> None:
        """Record a successful model round or tool dispatch."""
        family = _family(service)
        self._datum(f"{family}/RequestCount", 1, "Count", _dims(Operation=operation, Status="success"))
        self._datum(f"{family}/Latency", latency_ms, "Milliseconds", _dims(Operation=operation))
        logger.debug("Metric: %s %s success latency=%.1fms", service, operation, latency_ms)

    def record_failure(
        self,
        service: str,
        operation: str,
        error_type: str,
        latency_ms: float = 0,
    ) -> None:
        """Record a failed model round or tool dispatch."""
        family = _family(service)
        self._datum(f"{family}/RequestCount", 1, "Count", _dims(Operation=operation, Status="failure"))
        self._datum(f"{family}/ErrorCount", 1, "Count", _dims(Operation=operation, ErrorType=error_type))
        if latency_ms > 0:
            self._datum(f"{family}/Latency", latency_ms, "Milliseconds", _dims(Operation=operation))
        logger.debug(
            "Metric: %s %s failure error=%s latency=%.1fms",
            service, operation, error_type, latency_ms,
        )

    def record_chat(self, outcome: str, rounds: int | None, tool_calls: int | None) -> None:
        """Record how one chat request ended and how much of the loop it used.

        Counts passed as ``None`` are unknown and are not emitted.
        """
        dims = _dims(Outcome=outcome)
        self._datum("Chat/RequestCount", 1, "Count", dims)
        if rounds is not None:
            self._datum("Chat/Rounds", rounds, "Count", dims)
        if tool_calls is not None:
            self._datum("Chat/ToolCalls", tool_calls, "Count", dims)
        logger.debug("Metric: chat outcome=%s rounds=%s tool_calls=%s", outcome, rounds, tool_calls)

    def flush(self) -> int:
        """Send buffered metrics to CloudWatch.  Returns count sent."""
        with self._lock:
            if not self._buffer:
                return 0
            batch = self._buffer[:]
            self._buffer.clear()

        if not self._enabled:
            logger.debug("Metrics flush skipped (not enabled): %d items", len(batch))
            return 0

        sent = 0
        try:
            cw = self._get_cw_client()
            for i in range(0, len(batch), MAX_BATCH_SIZE):
                chunk = batch[i : i + MAX_BATCH_SIZE]
                cw.put_metric_data(Namespace=NAMESPACE, MetricData=chunk)
                sent += len(chunk)
            logger.info("Flushed %d metrics to CloudWatch", sent)
        except Exception:
            logger.exception("Failed to flush metrics to CloudWatch")
        return sent

    # ── Internal ──────────────────────────────────────────────────────

    def _datum(self, name: str, value: float, unit: str, dimensions: list[dict[str, str]]) -> None:
        with self._lock:
            self._buffer.append(
                {
                    "MetricName": name,
                    "Dimensions": dimensions,
                    "Timestamp": datetime.now(UTC),
                    "Value": value,
                    "Unit": unit,
                }
            )

    def _start_flush_thread(self) -> None:
        """Start a daemon thread that flushes metrics periodically."""

        def _loop():
            while True:
                time.sleep(FLUSH_INTERVAL_SECONDS)
                try:
                    self.flush()
                except Exception:
                    logger.exception("Metrics flush thread error")

        t = threading.Thread(target=_loop, daemon=True, name="metrics-flush")
        t.start()
        atexit.register(self.flush)
        logger.info("Metrics flush thread started (interval=%ds)", FLUSH_INTERVAL_SECONDS)


# ── Module-level singleton ──────────────────────────────────────────
metrics = MetricsClient()
