"""OpenTelemetry + Prometheus fallback wiring for the DocReady backend."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any

from fastapi import FastAPI

from backend import config

logger = logging.getLogger("docready.observability")


_initialized = False
_enabled = False
_tracer: Any | None = None
_trace_provider: Any | None = None
_meter_provider: Any | None = None
_fastapi_instrumentor: Any | None = None

_analysis_counter: Any | None = None
_analysis_latency_hist: Any | None = None
_ai_calls_counter: Any | None = None
_ai_latency_hist: Any | None = None

_prom_enabled = False
_prom_analysis_counter: Any | None = None
_prom_analysis_latency_hist: Any | None = None
_prom_ai_calls_counter: Any | None = None
_prom_ai_latency_hist: Any | None = None


def _normalize_otlp_endpoint(base_endpoint: str, signal_path: str) -> str:
    endpoint = (base_endpoint or "").strip()
    if not endpoint:
        return ""
    if endpoint.endswith(signal_path):
        return endpoint
    if endpoint.endswith("/"):
        endpoint = endpoint[:-1]
    if endpoint.endswith("/v1"):
        return f"{endpoint}{signal_path[3:]}"
    return f"{endpoint}{signal_path}"


def _labels(**values: str) -> dict[str, str]:
    return {key: (value or "").strip() or "unknown" for key, value in values.items()}


def initialize(app: FastAPI | None = None) -> None:
    global _initialized, _enabled, _tracer, _trace_provider, _meter_provider, _fastapi_instrumentor
    global _analysis_counter, _analysis_latency_hist, _ai_calls_counter, _ai_latency_hist
    global _prom_enabled, _prom_analysis_counter, _prom_analysis_latency_hist
    global _prom_ai_calls_counter, _prom_ai_latency_hist

    if _initialized:
        if _enabled and app and _fastapi_instrumentor:
            _fastapi_instrumentor.instrument_app(app)
        return

    _initialized = True

    if not config.OTEL_ENABLED:
        logger.info("OpenTelemetry disabled (DOCREADY_OTEL_ENABLED=false)")
        return

    from opentelemetry import metrics, trace
    from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter
    from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
    from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
    from opentelemetry.sdk.metrics import MeterProvider
    from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
    from opentelemetry.sdk.resources import Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor

    traces_endpoint = _normalize_otlp_endpoint(config.OTEL_ENDPOINT, "/v1/traces")
    metrics_endpoint = _normalize_otlp_endpoint(config.OTEL_ENDPOINT, "/v1/metrics")
    service_name = config.OTEL_SERVICE_NAME or "docready-backend"

    resource = Resource.create(
        {
            "service.name": service_name,
            "service.namespace": "docready",
        }
    )

    trace_provider = TracerProvider(resource=resource)
    trace_provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=traces_endpoint or None)))
    trace.set_tracer_provider(trace_provider)
    tracer = trace.get_tracer("docready.backend")

    metric_reader = PeriodicExportingMetricReader(
        OTLPMetricExporter(endpoint=metrics_endpoint or None)
    )
    meter_provider = MeterProvider(resource=resource, metric_readers=[metric_reader])
    metrics.set_meter_provider(meter_provider)
    meter = metrics.get_meter("docready.backend")

    _analysis_counter = meter.create_counter(
        "docready_agent_actions_total",
        unit="1",
        description="Count of content agent actions by outcome",
    )
    _analysis_latency_hist = meter.create_histogram(
        "docready_agent_action_latency_ms",
        unit="ms",
        description="Latency of content agent actions",
    )
    _ai_calls_counter = meter.create_counter(
        "docready_ai_calls_total",
        unit="1",
        description="AI gateway completion calls by outcome",
    )
    _ai_latency_hist = meter.create_histogram(
        "docready_ai_latency_ms",
        unit="ms",
        description="AI gateway completion latency",
    )

    _trace_provider = trace_provider
    _meter_provider = meter_provider
    _tracer = tracer
    _fastapi_instrumentor = FastAPIInstrumentor()
    _enabled = True

    if app:
        _fastapi_instrumentor.instrument_app(app)

    if config.PROM_PORT > 0:
        try:
            from prometheus_client import Counter, Histogram, start_http_server

            start_http_server(config.PROM_PORT)
            _prom_analysis_counter = Counter(
                "docready_agent_actions_total",
                "Count of content agent actions by outcome",
                ["action", "result"],
            )
            _prom_analysis_latency_hist = Histogram(
                "docready_agent_action_latency_ms",
                "Latency of content agent actions",
                ["action", "result"],
            )
            _prom_ai_calls_counter = Counter(
                "docready_ai_calls_total",
                "AI gateway completion calls by outcome",
                ["model", "result"],
            )
            _prom_ai_latency_hist = Histogram(
                "docready_ai_latency_ms",
                "AI gateway completion latency",
                ["model", "result"],
            )
            _prom_enabled = True
            logger.info("Prometheus fallback metrics server listening on port %s", config.PROM_PORT)
        except OSError as exc:
            logger.warning("Prometheus fallback not started: %s", exc)
            _prom_enabled = False

    logger.info(
        "OpenTelemetry initialized (service=%s endpoint=%s)",
        service_name,
        config.OTEL_ENDPOINT,
    )


def shutdown(app: FastAPI | None = None) -> None:
    global _enabled
    if not _initialized:
        return
    if app and _fastapi_instrumentor:
        _fastapi_instrumentor.uninstrument_app(app)
    if _meter_provider is not None:
        _meter_provider.shutdown()
    if _trace_provider is not None:
        _trace_provider.shutdown()
    _enabled = False


@contextmanager
def start_span(name: str, attributes: dict[str, Any] | None = None):
    if not _enabled or _tracer is None:
        yield None
        return
    with _tracer.start_as_current_span(name) as span:
        if attributes:
            for key, value in attributes.items():
                if value is not None:
                    span.set_attribute(key, value)
        yield span


def record_analysis(action: str, result: str, duration_ms: float) -> None:
    labels = _labels(action=action, result=result)
    duration = max(0.0, float(duration_ms))
    if _enabled and _analysis_counter is not None:
        _analysis_counter.add(1, labels)
    if _enabled and _analysis_latency_hist is not None:
        _analysis_latency_hist.record(duration, labels)
    if _prom_enabled and _prom_analysis_counter is not None:
        _prom_analysis_counter.labels(**labels).inc()
    if _prom_enabled and _prom_analysis_latency_hist is not None:
        _prom_analysis_latency_hist.labels(**labels).observe(duration)


def record_ai_call(model: str, result: str, duration_ms: float) -> None:
    labels = _labels(model=model, result=result)
    duration = max(0.0, float(duration_ms))
    if _enabled and _ai_calls_counter is not None:
        _ai_calls_counter.add(1, labels)
    if _enabled and _ai_latency_hist is not None:
        _ai_latency_hist.record(duration, labels)
    if _prom_enabled and _prom_ai_calls_counter is not None:
        _prom_ai_calls_counter.labels(**labels).inc()
    if _prom_enabled and _prom_ai_latency_hist is not None:
        _prom_ai_latency_hist.labels(**labels).observe(duration)
