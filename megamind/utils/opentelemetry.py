"""\
OpenTelemetry
=============

Author: Akshay Mestry <xa@mes3.dev>
Created on: Friday, July 04 2025
Last updated on: Monday, October 19 2026

This module provides `OpenTelemetry` integration for megamind. Every
operation a binding dispatches runs inside a span, which makes slow or
failing calls visible in whatever tracing backend the application
exports to.
"""

from __future__ import annotations

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import (
    OTLPSpanExporter,
)
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.trace.export import ConsoleSpanExporter
from opentelemetry.sdk.trace.export import SimpleSpanProcessor

from megamind.core.config import Config

__all__: list[str] = ["get_tracer"]


def get_tracer(
    config: Config | None = None,
    name: str | None = None,
) -> trace.Tracer:
    """Configure and return a tracer for a call manager.

    The provider is private to the returned tracer rather than installed
    globally, so several managers (and test suites) can coexist. With
    telemetry disabled the provider has no span processor and spans are
    dropped.

    :param config: An optional configuration object to initialise the
        tracer. If not provided, a default `Config` instance is created.
    :param name: Override for the service name, defaults to `None`. If
        not provided, uses the name from the configuration.
    :return: A configured `OpenTelemetry Tracer` instance.
    """
    if config is None:
        config = Config()
    service = name or config.telemetry.name or config.name
    resource = Resource.create(
        {
            "service.name": service,
            "service.version": config.version,
            "deployment.environment": (
                "development" if config.debug else "production"
            ),
            "telemetry.sdk.name": "megamind",
        }
    )
    provider = TracerProvider(resource=resource)
    if not config.telemetry.enabled:
        return provider.get_tracer(service)
    if config.debug:
        processor = SimpleSpanProcessor(ConsoleSpanExporter())
    else:
        processor = BatchSpanProcessor(OTLPSpanExporter())
    provider.add_span_processor(processor)
    return provider.get_tracer(service)
