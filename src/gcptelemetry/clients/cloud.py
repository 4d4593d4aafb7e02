"""Backend client backed by the Cloud Trace and Cloud Monitoring GAPIC clients."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any, Callable, Sequence

from google.api_core.exceptions import GoogleAPICallError, RetryError
from google.cloud import monitoring_v3, trace_v2

from gcptelemetry._internal.discovery import default_credentials
from gcptelemetry.exceptions import RemoteError

if TYPE_CHECKING:
    from google.api.metric_pb2 import MetricDescriptor

    from gcptelemetry.config import ExportConfiguration

logger = logging.getLogger(__name__)


class GoogleCloudBackendClient:
    """BackendClient that talks to Google Cloud over gRPC.

    If the configuration carries a backend stub, every call is sent to it
    and no credentials are needed. Otherwise credentials are resolved now
    (explicit ones first, then application default credentials) and a
    service client per signal is created on first use.

    Every RPC is a single attempt: retries are disabled and the configured
    deadline is passed as the call timeout.

    Raises:
        CredentialError: If no stub and no credential is configured and no
            application default credential is available.
    """

    def __init__(self, configuration: ExportConfiguration) -> None:
        self._stub = configuration.backend_stub
        self._timeout = configuration.deadline_seconds
        self._credentials = None
        if self._stub is None:
            self._credentials = configuration.credentials or default_credentials()

        self._lock = threading.Lock()
        self._trace_client: trace_v2.TraceServiceClient | None = None
        self._metric_client: monitoring_v3.MetricServiceClient | None = None
        self._closed = False

    def submit_spans(self, resource_name: str, spans: Sequence[trace_v2.Span]) -> None:
        self._call(
            "batch_write_spans",
            self._trace_service().batch_write_spans,
            name=resource_name,
            spans=list(spans),
        )

    def submit_time_series(
        self, resource_name: str, series: Sequence[monitoring_v3.TimeSeries]
    ) -> None:
        self._call(
            "create_time_series",
            self._metric_service().create_time_series,
            name=resource_name,
            time_series=list(series),
        )

    def submit_metric_descriptor(
        self, resource_name: str, descriptor: MetricDescriptor
    ) -> None:
        self._call(
            "create_metric_descriptor",
            self._metric_service().create_metric_descriptor,
            name=resource_name,
            metric_descriptor=descriptor,
        )

    def shutdown(self) -> None:
        """Close the underlying transports. Later calls do nothing."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            services = [self._stub, self._trace_client, self._metric_client]

        for service in services:
            transport = getattr(service, "transport", None)
            if transport is not None:
                transport.close()

    def _trace_service(self) -> Any:
        if self._stub is not None:
            return self._stub
        with self._lock:
            if self._trace_client is None:
                self._trace_client = trace_v2.TraceServiceClient(
                    credentials=self._credentials
                )
                logger.debug("Created Cloud Trace service client")
            return self._trace_client

    def _metric_service(self) -> Any:
        if self._stub is not None:
            return self._stub
        with self._lock:
            if self._metric_client is None:
                self._metric_client = monitoring_v3.MetricServiceClient(
                    credentials=self._credentials
                )
                logger.debug("Created Cloud Monitoring service client")
            return self._metric_client

    def _call(self, operation: str, method: Callable[..., Any], **kwargs: Any) -> None:
        try:
            method(timeout=self._timeout, retry=None, **kwargs)
        except (GoogleAPICallError, RetryError) as e:
            raise RemoteError(f"{operation} failed: {e}") from e
