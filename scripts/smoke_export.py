#!/usr/bin/env python3
"""Send a few spans and a counter to a real Google Cloud project.

Uses application default credentials and GOOGLE_CLOUD_PROJECT.
"""

from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from gcptelemetry import (
    CloudMonitoringMetricsExporter,
    CloudTraceSpanExporter,
    ExportConfiguration,
)

config = ExportConfiguration.builder().build()
print(f"Exporting to project {config.project_id}...")

resource = Resource.create({"service.name": "smoke-export"})
tracer_provider = TracerProvider(resource=resource)
tracer_provider.add_span_processor(BatchSpanProcessor(CloudTraceSpanExporter(config)))
meter_provider = MeterProvider(
    resource=resource,
    metric_readers=[
        PeriodicExportingMetricReader(
            CloudMonitoringMetricsExporter(config), export_interval_millis=60_000
        )
    ],
)

tracer = tracer_provider.get_tracer("smoke-export")
requests = meter_provider.get_meter("smoke-export").create_counter("smoke.requests")

print("\nCreating test spans...")

with tracer.start_as_current_span("checkout") as workflow_span:
    workflow_span.set_attribute("http.method", "POST")
    workflow_span.set_attribute("http.status_code", 200)

    with tracer.start_as_current_span("load-cart") as cart_span:
        cart_span.set_attribute("cart.items", 3)
        cart_span.set_attribute("cart.total", 42.5)
        print("  Created cart span")

    with tracer.start_as_current_span("charge") as charge_span:
        charge_span.add_event("card authorized", {"provider": "test"})
        print("  Created charge span")

    requests.add(1, {"route": "/checkout"})

print("\nFlushing...")
tracer_provider.shutdown()
meter_provider.shutdown()
print("Done. Check Cloud Trace and Metrics Explorer.")
