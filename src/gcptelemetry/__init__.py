"""OpenTelemetry exporters for Google Cloud Trace and Cloud Monitoring.

    from opentelemetry.sdk.trace.export import BatchSpanProcessor
    from gcptelemetry import CloudTraceSpanExporter, ExportConfiguration

    config = ExportConfiguration.builder().set_project_id("my-project").build()
    provider.add_span_processor(BatchSpanProcessor(CloudTraceSpanExporter(config)))
"""

from __future__ import annotations

from gcptelemetry.exceptions import (
    ConfigurationError,
    CredentialError,
    GcpTelemetryError,
    RemoteError,
    TranslationError,
)

__version__ = "0.1.0"

__all__ = [
    "CloudMonitoringMetricsExporter",
    "CloudTraceSpanExporter",
    "ConfigurationError",
    "CredentialError",
    "DescriptorStrategy",
    "ExportConfiguration",
    "GcpTelemetryError",
    "RemoteError",
    "TranslationError",
    "__version__",
]

_LAZY_ATTRIBUTES = {
    "CloudMonitoringMetricsExporter": "gcptelemetry.exporters.metrics",
    "CloudTraceSpanExporter": "gcptelemetry.exporters.trace",
    "DescriptorStrategy": "gcptelemetry.config",
    "ExportConfiguration": "gcptelemetry.config",
}


def __getattr__(name: str):
    if name in _LAZY_ATTRIBUTES:
        import importlib

        module = importlib.import_module(_LAZY_ATTRIBUTES[name])
        return getattr(module, name)
    raise AttributeError(f"module 'gcptelemetry' has no attribute '{name}'")


def __dir__() -> list[str]:
    return sorted(__all__)
