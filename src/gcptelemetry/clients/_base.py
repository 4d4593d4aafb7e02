"""BackendClient Protocol definition."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, Sequence

if TYPE_CHECKING:
    from google.api.metric_pb2 import MetricDescriptor
    from google.cloud.monitoring_v3 import TimeSeries
    from google.cloud.trace_v2 import Span


class BackendClient(Protocol):
    """Protocol that all backend clients must satisfy.

    Each submit method makes a single attempt bounded by the configured
    deadline and raises RemoteError on failure. Calling submit methods
    after shutdown() is not supported.
    """

    def submit_spans(self, resource_name: str, spans: Sequence[Span]) -> None:
        """Write a batch of spans under projects/{project_id}."""
        ...

    def submit_time_series(
        self, resource_name: str, series: Sequence[TimeSeries]
    ) -> None:
        """Write a batch of time series under projects/{project_id}."""
        ...

    def submit_metric_descriptor(
        self, resource_name: str, descriptor: MetricDescriptor
    ) -> None:
        """Register a metric descriptor under projects/{project_id}."""
        ...

    def shutdown(self) -> None:
        """Release transport resources."""
        ...
