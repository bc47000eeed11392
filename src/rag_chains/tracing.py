"""OpenTelemetry tracing helpers for chains.

Every traced chain run becomes a span named after the stage, recording a
preview of its input and output and the run's status. A traced QA chain adds
a parent ``qa-chain`` span so a whole question shows up as one trace tree.

Usage with an OTLP backend such as Arize Phoenix:

    from rag_chains.tracing import build_traced_qa_chain, configure_tracing, get_tracer

    configure_tracing(endpoint="http://localhost:6006/v1/traces", service_name="rag-chains")
    traced = build_traced_qa_chain(qa_chain, get_tracer("rag-chains.qa"))
    answer = traced.run("who is john doe?")

Without ``endpoint`` spans are printed to stdout.
"""
from __future__ import annotations

import logging
import os

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource, SERVICE_NAME
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    ConsoleSpanExporter,
    SimpleSpanProcessor,
    SpanExporter,
)

from .chain import Chain, ComposedChain
from .schema import AnswerWithSources, Document

# OpenInference semantic-convention attribute names
ATTR_INPUT_VALUE = "input.value"
ATTR_OUTPUT_VALUE = "output.value"
ATTR_CHAIN_STAGE = "chain.stage"
ATTR_RETRIEVAL_DOCUMENTS = "retrieval.documents"
ATTR_LLM_MODEL_NAME = "llm.model_name"

PREVIEW_CHARS = 500

logger = logging.getLogger(__name__)

_provider: TracerProvider | None = None

OTLP_ENDPOINT_ENV = "RAG_CHAINS_OTLP_ENDPOINT"
DEFAULT_TRACER_NAME = "rag_chains"


def _build_exporter(endpoint: str | None) -> SpanExporter:
    if endpoint is None:
        return ConsoleSpanExporter()
    try:
        from opentelemetry.exporter.otlp.proto.http.trace_exporter import (
            OTLPSpanExporter,
        )
    except ImportError as exc:  # pragma: no cover
        raise ImportError(
            "exporting chain spans to an OTLP endpoint needs the otlp extra: "
            "pip install 'rag-chains[otlp]' (opentelemetry-exporter-otlp-proto-http)"
        ) from exc
    return OTLPSpanExporter(endpoint=endpoint)


def configure_tracing(
    exporter: SpanExporter | None = None,
    endpoint: str | None = None,
    service_name: str = "rag-chains",
) -> TracerProvider:
    """Register the provider that receives chain stage spans.

    Spans go to ``exporter`` when given, else to the OTLP ``endpoint`` (read
    from ``RAG_CHAINS_OTLP_ENDPOINT`` when not passed), else to stdout. Each
    span is exported as soon as its stage finishes, so a failed chain still
    leaves the spans of the stages that ran.

    Returns:
        The provider, also registered as the global OTel provider.
    """
    global _provider

    if exporter is None:
        exporter = _build_exporter(endpoint or os.getenv(OTLP_ENDPOINT_ENV))

    provider = TracerProvider(resource=Resource(attributes={SERVICE_NAME: service_name}))
    provider.add_span_processor(SimpleSpanProcessor(exporter))
    trace.set_tracer_provider(provider)
    _provider = provider
    logger.debug("chain tracing exports to %s", type(exporter).__name__)
    return provider


def get_tracer(name: str = DEFAULT_TRACER_NAME) -> trace.Tracer:
    """Tracer for chain spans; a no-op tracer until tracing is configured."""
    provider = _provider or trace.get_tracer_provider()
    return provider.get_tracer(name)


def _preview(value) -> str:
    if isinstance(value, AnswerWithSources):
        text = f"{value.answer} (sources: {', '.join(value.sources)})"
    elif isinstance(value, list) and all(isinstance(item, Document) for item in value):
        text = "\n".join(document.content for document in value)
    else:
        text = str(value)
    return text[:PREVIEW_CHARS]


class TracedChain(Chain):
    """Wrap a chain so each run is recorded as a span."""

    def __init__(self, inner: Chain, tracer: trace.Tracer, span_name: str | None = None):
        self.inner = inner
        self.tracer = tracer
        self.span_name = span_name or inner.name

    @property
    def name(self) -> str:
        return self.inner.name

    def run(self, input):
        with self.tracer.start_as_current_span(self.span_name) as span:
            span.set_attribute(ATTR_CHAIN_STAGE, self.inner.name)
            span.set_attribute(ATTR_INPUT_VALUE, _preview(input))
            model = getattr(getattr(self.inner, "parameters", None), "model", None)
            if model:
                span.set_attribute(ATTR_LLM_MODEL_NAME, model)
            try:
                output = self.inner.run(input)
            except Exception as exc:
                span.set_status(trace.StatusCode.ERROR, str(exc))
                span.record_exception(exc)
                raise
            if isinstance(output, list):
                span.set_attribute(ATTR_RETRIEVAL_DOCUMENTS, len(output))
            span.set_attribute(ATTR_OUTPUT_VALUE, _preview(output))
            span.set_status(trace.StatusCode.OK)
            return output

    def close(self) -> None:
        self.inner.close()


def traced_chain(chain: Chain, tracer: trace.Tracer) -> Chain:
    """Wrap every stage of ``chain`` in its own span, keeping the stage order."""
    if not isinstance(chain, ComposedChain):
        return TracedChain(chain, tracer)
    stages = [TracedChain(stage, tracer) for stage in chain.stages]
    traced = stages[0]
    for stage in stages[1:]:
        traced = traced.chain(stage)
    return traced


def build_traced_qa_chain(qa_chain: Chain, tracer: trace.Tracer) -> Chain:
    """Trace every stage of a QA chain under a single ``qa-chain`` parent span."""
    return TracedChain(traced_chain(qa_chain, tracer), tracer, span_name="qa-chain")
