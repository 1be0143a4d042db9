"""OpenTelemetry instrumentation for migrations, embeddings and search.

Tracing is optional and configuration-driven. When disabled, every helper in
this module is a no-op so call sites never need to check.

Span layout:
    gtdindex.migration        one per MigrationPipeline.execute
      gtdindex.migration.batch  one per checkpointed batch
    gtdindex.embed_queue      one per EmbeddingQueuePipeline.execute
      embedding.embed           one per provider call
    gtdindex.search           one per HybridSearchPipeline.search
      embedding.embed           query embedding

Usage:
    config.tracing.enabled = True
    configure_tracing(config.tracing)

    with traced_request("search", attributes={"search.limit": 10}):
        with traced_embed(model, query, is_query=True) as meta:
            vector = await provider.embed(query)
            meta["embedding_dim"] = len(vector)
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generator

from loguru import logger

if TYPE_CHECKING:
    from opentelemetry.trace import Span, Tracer


@dataclass
class TracingConfig:
    """OpenTelemetry tracing configuration.

    Attributes:
        enabled: Whether tracing is enabled (default: False).
        endpoint: OTLP HTTP endpoint receiving spans.
        service_name: Service name for traces (default: gtdindex).
        service_version: Service version for traces.
        sample_rate: Sampling rate 0.0-1.0 (default: 1.0 = all traces).
        batch_export: Use BatchSpanProcessor vs SimpleSpanProcessor.
    """

    enabled: bool = False
    endpoint: str = "http://localhost:4318/v1/traces"
    service_name: str = "gtdindex"
    service_version: str = "1.0.0"
    sample_rate: float = 1.0
    batch_export: bool = True


_tracer: "Tracer | None" = None
_provider: Any = None


def get_tracer() -> "Tracer | None":
    """Get the configured tracer, or None if tracing is disabled."""
    return _tracer


def configure_tracing(config: TracingConfig) -> "Tracer | None":
    """Install a tracer provider exporting spans over OTLP HTTP.

    Setup problems (missing exporter, bad endpoint) are logged and leave
    tracing disabled; they never stop the caller.

    Returns:
        The tracer, or None if tracing is disabled or could not be set up.
    """
    global _tracer, _provider

    if not config.enabled:
        logger.debug("Tracing is disabled")
        _tracer = None
        return None

    try:
        from opentelemetry import trace
        from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
        from opentelemetry.sdk.resources import Resource
        from opentelemetry.sdk.trace import TracerProvider
        from opentelemetry.sdk.trace.export import BatchSpanProcessor, SimpleSpanProcessor
        from opentelemetry.sdk.trace.sampling import ALWAYS_ON, TraceIdRatioBased

        sampler = ALWAYS_ON if config.sample_rate >= 1.0 else TraceIdRatioBased(config.sample_rate)
        provider = TracerProvider(
            resource=Resource.create(
                {"service.name": config.service_name, "service.version": config.service_version}
            ),
            sampler=sampler,
        )
        exporter = OTLPSpanExporter(endpoint=config.endpoint)
        processor_cls = BatchSpanProcessor if config.batch_export else SimpleSpanProcessor
        provider.add_span_processor(processor_cls(exporter))
        trace.set_tracer_provider(provider)
    except Exception as e:
        logger.warning(f"Failed to configure tracing: {e}")
        _tracer = None
        return None

    _provider = provider
    _tracer = provider.get_tracer(config.service_name, config.service_version)
    logger.info(f"Tracing enabled: endpoint={config.endpoint}, sample_rate={config.sample_rate}")
    return _tracer


def shutdown_tracing() -> None:
    """Flush pending spans and disable tracing."""
    global _tracer, _provider

    if _provider is not None:
        try:
            _provider.shutdown()
            logger.debug("Tracing shutdown complete")
        except Exception as e:
            logger.warning(f"Error shutting down tracing: {e}")

    _tracer = None
    _provider = None


@contextmanager
def _span(
    name: str,
    tracer: "Tracer | None",
    attributes: dict[str, Any] | None = None,
) -> Generator["Span | None", None, None]:
    """Open a span that records OK, or the exception and ERROR, on exit."""
    active_tracer = tracer or _tracer
    if active_tracer is None:
        yield None
        return

    from opentelemetry.trace import Status, StatusCode

    with active_tracer.start_as_current_span(name) as span:
        for key, value in (attributes or {}).items():
            if value is not None:
                span.set_attribute(key, value)
        try:
            yield span
        except Exception as e:
            span.record_exception(e)
            span.set_status(Status(StatusCode.ERROR, str(e)))
            raise
        span.set_status(Status(StatusCode.OK))


@contextmanager
def traced_embed(
    model: str,
    input_text: str,
    *,
    tracer: "Tracer | None" = None,
    is_query: bool = False,
) -> Generator[dict[str, Any], None, None]:
    """Trace one embedding call.

    Yields:
        Dict for the caller to record result metadata (``embedding_dim``).
    """
    result_meta: dict[str, Any] = {}
    attributes = {
        "embedding.model": model,
        "embedding.input_length": len(input_text),
        "embedding.is_query": is_query,
    }
    start_time = time.perf_counter()

    with _span("embedding.embed", tracer, attributes) as span:
        try:
            yield result_meta
        finally:
            if span is not None:
                span.set_attribute("embedding.latency_ms", (time.perf_counter() - start_time) * 1000)
                if "embedding_dim" in result_meta:
                    span.set_attribute("embedding.dimension", result_meta["embedding_dim"])


@contextmanager
def traced_request(
    operation: str,
    *,
    tracer: "Tracer | None" = None,
    attributes: dict[str, Any] | None = None,
) -> Generator["Span | None", None, None]:
    """Create the parent span of a migration, queue run or search.

    Yields:
        The span (or None if tracing disabled).
    """
    with _span(f"gtdindex.{operation}", tracer, attributes) as span:
        yield span


@contextmanager
def traced_batch(
    job_id: str,
    batch_number: int,
    notes: int,
    *,
    tracer: "Tracer | None" = None,
) -> Generator[dict[str, Any], None, None]:
    """Trace one migration batch up to its checkpoint.

    Yields:
        Dict for the caller to record ``processed`` and ``failed`` counts.
    """
    counts: dict[str, Any] = {}
    attributes = {
        "migration.job_id": job_id,
        "migration.batch": batch_number,
        "migration.batch_notes": notes,
    }
    with _span("gtdindex.migration.batch", tracer, attributes) as span:
        try:
            yield counts
        finally:
            if span is not None:
                for key, value in counts.items():
                    span.set_attribute(f"migration.{key}", value)
