"""Cloud Trace span exporter.

This module provides the OpenTelemetry SpanExporter that writes spans to
Cloud Trace with one BatchWriteSpans call per export.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Sequence

from opentelemetry.sdk.trace.export import SpanExporter, SpanExportResult

from gcptelemetry._internal.lifecycle import ExporterLifecycle
from gcptelemetry._internal.logging import log_internal_error
from gcptelemetry.clients import GoogleCloudBackendClient
from gcptelemetry.config import ExportConfiguration
from gcptelemetry.exceptions import RemoteError, TranslationError
from gcptelemetry.exporters.trace.translator import TraceTranslator

if TYPE_CHECKING:
    from opentelemetry.sdk.trace import ReadableSpan

    from gcptelemetry.clients import BackendClient

logger = logging.getLogger(__name__)


class CloudTraceSpanExporter(SpanExporter):
    """SpanExporter that sends spans to Google Cloud Trace.

    export() is synchronous: every span in the batch is translated and
    written in a single RPC bounded by the configured deadline. It never
    raises; failures are logged and reported as SpanExportResult.FAILURE.
    A span that cannot be translated is dropped and the rest of the batch
    is still sent.

    The exporter does not serialize concurrent export() calls; the SDK
    span processors issue one at a time.

    Args:
        configuration: Validated export configuration.
        client: Backend client to use. Defaults to a
            GoogleCloudBackendClient built from the configuration.

    Raises:
        CredentialError: If no client is given and no credential can be
            resolved.

    Example:
        >>> from opentelemetry.sdk.trace.export import BatchSpanProcessor
        >>> exporter = CloudTraceSpanExporter.create_with_default_configuration()
        >>> provider.add_span_processor(BatchSpanProcessor(exporter))
    """

    def __init__(
        self,
        configuration: ExportConfiguration,
        client: BackendClient | None = None,
    ) -> None:
        self._configuration = configuration
        self._client = client if client is not None else GoogleCloudBackendClient(
            configuration
        )
        self._translator = TraceTranslator(
            configuration.attribute_mapping, configuration.fixed_attributes
        )
        self._lifecycle = ExporterLifecycle(type(self).__name__)

    @classmethod
    def create_with_default_configuration(cls) -> CloudTraceSpanExporter:
        """Create an exporter for the ambient project with default options."""
        return cls(ExportConfiguration.builder().build())

    def export(self, spans: Sequence[ReadableSpan]) -> SpanExportResult:
        """Translate and write a batch of spans.

        Args:
            spans: Finished spans handed over by the span processor.

        Returns:
            SUCCESS if the batch was written (or was empty), FAILURE
            otherwise.
        """
        try:
            return self._export(spans)
        except Exception as e:
            # Telemetry never breaks the SDK dispatch loop
            log_internal_error("CloudTraceSpanExporter.export", e)
            return SpanExportResult.FAILURE

    def _export(self, spans: Sequence[ReadableSpan]) -> SpanExportResult:
        if self._lifecycle.is_shutdown:
            logger.warning(
                "Exporter already shut down, dropping %d spans", len(spans)
            )
            return SpanExportResult.FAILURE

        if not spans:
            return SpanExportResult.SUCCESS

        project_id = self._configuration.project_id
        cloud_spans = []
        for span in spans:
            try:
                cloud_spans.append(self._translator.translate(span, project_id))
            except TranslationError as e:
                logger.warning("Dropping span %r: %s", span.name, e)

        dropped = len(spans) - len(cloud_spans)
        if not cloud_spans:
            logger.warning("No span in the batch could be translated (%d)", dropped)
            return SpanExportResult.FAILURE

        try:
            self._client.submit_spans(self._configuration.resource_name, cloud_spans)
        except RemoteError as e:
            logger.warning("Failed to export %d spans: %s", len(cloud_spans), e)
            return SpanExportResult.FAILURE

        logger.debug(
            "Exported %d spans to Cloud Trace (%d dropped)", len(cloud_spans), dropped
        )
        return SpanExportResult.SUCCESS

    def force_flush(self, timeout_millis: int = 30000) -> bool:
        """Always returns False.

        Spans are written synchronously in export(), so there is nothing
        buffered to flush.
        """
        return False

    def shutdown(self) -> None:
        """Release the backend client. Safe to call more than once."""
        self._lifecycle.shutdown(self._client)
