"""Cloud Trace exporter for the gcptelemetry package."""

from gcptelemetry.exporters.trace.exporter import CloudTraceSpanExporter
from gcptelemetry.exporters.trace.translator import TraceTranslator

__all__ = ["CloudTraceSpanExporter", "TraceTranslator"]
