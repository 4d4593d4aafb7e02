"""Cloud Monitoring exporter for the gcptelemetry package."""

from gcptelemetry.exporters.metrics.exporter import CloudMonitoringMetricsExporter
from gcptelemetry.exporters.metrics.translator import MetricTranslator

__all__ = ["CloudMonitoringMetricsExporter", "MetricTranslator"]
