"""Cloud Monitoring metrics exporter.

This module provides the OpenTelemetry MetricExporter that writes metric
points to Cloud Monitoring with one CreateTimeSeries call per export,
registering metric descriptors according to the configured strategy.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any

from opentelemetry.sdk import metrics as sdk_metrics
from opentelemetry.sdk.metrics.export import (
    AggregationTemporality,
    MetricExporter,
    MetricExportResult,
)

from gcptelemetry._internal.lifecycle import ExporterLifecycle
from gcptelemetry._internal.logging import log_internal_error
from gcptelemetry.clients import GoogleCloudBackendClient
from gcptelemetry.config import DescriptorStrategy, ExportConfiguration
from gcptelemetry.exceptions import RemoteError, TranslationError
from gcptelemetry.exporters.metrics.translator import MetricTranslator

if TYPE_CHECKING:
    from opentelemetry.sdk.metrics.export import Metric, MetricsData

    from gcptelemetry.clients import BackendClient

logger = logging.getLogger(__name__)

# Cloud Monitoring stores cumulative series; delta points are rejected
PREFERRED_TEMPORALITY: dict[type, AggregationTemporality] = {
    instrument: AggregationTemporality.CUMULATIVE
    for instrument in (
        sdk_metrics.Counter,
        sdk_metrics.UpDownCounter,
        sdk_metrics.Histogram,
        sdk_metrics.ObservableCounter,
        sdk_metrics.ObservableUpDownCounter,
        sdk_metrics.ObservableGauge,
    )
}

# Descriptors registered by SEND_ONCE exporters in this process, keyed by
# (projects/{id}, metric type)
_sent_descriptors: set[tuple[str, str]] = set()
_sent_descriptors_lock = threading.Lock()


class CloudMonitoringMetricsExporter(MetricExporter):
    """MetricExporter that sends metric points to Google Cloud Monitoring.

    Each export translates every metric in the batch and writes all the
    resulting time series in a single RPC. Metric descriptors are
    registered first, following the configured DescriptorStrategy:

    - SEND_ONCE: each metric type once per project for the lifetime of the
      process, shared by all exporters and retried on the next export if
      registration failed
    - ALWAYS_SEND: on every export
    - NEVER_SEND: never (descriptors are created implicitly by the backend)

    A failed descriptor registration is logged and does not fail the
    export. Like CloudTraceSpanExporter, export() never raises.

    Args:
        configuration: Validated export configuration.
        client: Backend client to use. Defaults to a
            GoogleCloudBackendClient built from the configuration.
        preferred_aggregation: Passed through to MetricExporter.
    """

    def __init__(
        self,
        configuration: ExportConfiguration,
        client: BackendClient | None = None,
        preferred_aggregation: dict[type, Any] | None = None,
    ) -> None:
        super().__init__(
            preferred_temporality=PREFERRED_TEMPORALITY,
            preferred_aggregation=preferred_aggregation,
        )
        self._configuration = configuration
        self._client = client if client is not None else GoogleCloudBackendClient(
            configuration
        )
        self._translator = MetricTranslator(configuration.metric_prefix)
        self._lifecycle = ExporterLifecycle(type(self).__name__)

    @classmethod
    def create_with_default_configuration(cls) -> CloudMonitoringMetricsExporter:
        """Create an exporter for the ambient project with default options."""
        return cls(ExportConfiguration.builder().build())

    def export(
        self,
        metrics_data: MetricsData,
        timeout_millis: float = 10_000,
        **kwargs: Any,
    ) -> MetricExportResult:
        """Translate and write a batch of metrics.

        The RPC deadline comes from the configuration; timeout_millis is
        accepted for interface compatibility only.
        """
        try:
            return self._export(metrics_data)
        except Exception as e:
            # Telemetry never breaks the SDK dispatch loop
            log_internal_error("CloudMonitoringMetricsExporter.export", e)
            return MetricExportResult.FAILURE

    def _export(self, metrics_data: MetricsData) -> MetricExportResult:
        if self._lifecycle.is_shutdown:
            logger.warning("Exporter already shut down, dropping metrics batch")
            return MetricExportResult.FAILURE

        project_id = self._configuration.project_id
        series = []
        translated: list[Metric] = []
        dropped = 0
        for resource_metrics in metrics_data.resource_metrics:
            for scope_metrics in resource_metrics.scope_metrics:
                for metric in scope_metrics.metrics:
                    try:
                        series.extend(
                            self._translator.translate(
                                metric, resource_metrics.resource, project_id
                            )
                        )
                    except TranslationError as e:
                        logger.warning("Dropping metric %r: %s", metric.name, e)
                        dropped += 1
                        continue
                    translated.append(metric)

        if not translated:
            if dropped:
                logger.warning(
                    "No metric in the batch could be translated (%d)", dropped
                )
                return MetricExportResult.FAILURE
            return MetricExportResult.SUCCESS

        self._register_descriptors(translated)

        if not series:
            return MetricExportResult.SUCCESS

        try:
            self._client.submit_time_series(self._configuration.resource_name, series)
        except RemoteError as e:
            logger.warning("Failed to export %d time series: %s", len(series), e)
            return MetricExportResult.FAILURE

        logger.debug(
            "Exported %d time series to Cloud Monitoring (%d metrics dropped)",
            len(series),
            dropped,
        )
        return MetricExportResult.SUCCESS

    def _register_descriptors(self, metrics: list[Metric]) -> None:
        strategy = self._configuration.descriptor_strategy
        if strategy is DescriptorStrategy.NEVER_SEND:
            return

        resource_name = self._configuration.resource_name
        seen: set[str] = set()
        for metric in metrics:
            metric_type = self._translator.metric_type(metric)
            if metric_type in seen:
                continue
            seen.add(metric_type)

            key = (resource_name, metric_type)
            if strategy is DescriptorStrategy.SEND_ONCE:
                with _sent_descriptors_lock:
                    if key in _sent_descriptors:
                        continue

            try:
                descriptor = self._translator.descriptor(metric)
                self._client.submit_metric_descriptor(resource_name, descriptor)
            except (TranslationError, RemoteError) as e:
                logger.warning(
                    "Failed to register metric descriptor %s: %s", metric_type, e
                )
                continue

            with _sent_descriptors_lock:
                _sent_descriptors.add(key)

    def force_flush(self, timeout_millis: float = 10_000) -> bool:
        """Always returns False: points are written synchronously in export()."""
        return False

    def shutdown(self, timeout_millis: float = 30_000, **kwargs: Any) -> None:
        """Release the backend client. Safe to call more than once."""
        self._lifecycle.shutdown(self._client)
