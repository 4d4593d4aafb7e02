"""Integration test fixtures for gcptelemetry.

These fixtures wire the exporters into real OpenTelemetry SDK providers,
backed by FakeBackendClient, so the whole pipeline runs without
external services.
"""

from __future__ import annotations

from typing import Generator

import pytest
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor

from gcptelemetry import CloudMonitoringMetricsExporter, CloudTraceSpanExporter
from gcptelemetry.config import ExportConfiguration
from tests.fakes import FakeBackendClient

# =============================================================================
# PROVIDER FIXTURES
# =============================================================================


@pytest.fixture
def resource() -> Resource:
    return Resource.create({SERVICE_NAME: "checkout"})


@pytest.fixture
def trace_exporter(
    configuration: ExportConfiguration, fake_client: FakeBackendClient
) -> CloudTraceSpanExporter:
    return CloudTraceSpanExporter(configuration, client=fake_client)


@pytest.fixture
def isolated_tracer_provider(
    resource: Resource, trace_exporter: CloudTraceSpanExporter
) -> Generator[TracerProvider, None, None]:
    """Create a TracerProvider exporting through CloudTraceSpanExporter.

    The provider is never installed globally.

    Usage:
        def test_example(isolated_tracer_provider, fake_client):
            tracer = isolated_tracer_provider.get_tracer("test")
            with tracer.start_as_current_span("op"):
                pass
            assert fake_client.spans
    """
    provider = TracerProvider(resource=resource)
    provider.add_span_processor(SimpleSpanProcessor(trace_exporter))

    yield provider

    provider.shutdown()


@pytest.fixture
def metrics_exporter(
    configuration: ExportConfiguration, fake_client: FakeBackendClient
) -> CloudMonitoringMetricsExporter:
    return CloudMonitoringMetricsExporter(configuration, client=fake_client)


@pytest.fixture
def isolated_meter_provider(
    resource: Resource, metrics_exporter: CloudMonitoringMetricsExporter
) -> MeterProvider:
    """Create a MeterProvider whose reader only exports on shutdown.

    Tests are responsible for calling shutdown() on the provider.
    """
    reader = PeriodicExportingMetricReader(
        metrics_exporter, export_interval_millis=3_600_000
    )
    return MeterProvider(resource=resource, metric_readers=[reader])
