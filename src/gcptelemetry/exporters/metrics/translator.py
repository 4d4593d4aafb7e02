"""Translation of OpenTelemetry metrics to Cloud Monitoring time series."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Any, Mapping

from google.api import distribution_pb2, label_pb2, metric_pb2, monitored_resource_pb2
from google.cloud.monitoring_v3 import Point, TimeInterval, TimeSeries, TypedValue
from opentelemetry.sdk.metrics.export import (
    AggregationTemporality,
    Gauge,
    Histogram,
    HistogramDataPoint,
    Sum,
)

from gcptelemetry._internal.attributes import (
    INT64_MAX,
    INT64_MIN,
    collect_attributes,
    stringify_value,
    truncate_str,
)
from gcptelemetry._internal.resource import get_monitored_resource
from gcptelemetry._internal.timestamps import to_timestamp
from gcptelemetry.config import DEFAULT_METRIC_PREFIX
from gcptelemetry.exceptions import TranslationError

if TYPE_CHECKING:
    from opentelemetry.sdk.metrics.export import Metric, NumberDataPoint
    from opentelemetry.sdk.resources import Resource

logger = logging.getLogger(__name__)

MAX_LABELS = 30
MAX_LABEL_KEY_BYTES = 100
MAX_LABEL_VALUE_BYTES = 1024

MetricKind = metric_pb2.MetricDescriptor.MetricKind
ValueType = metric_pb2.MetricDescriptor.ValueType

_INVALID_LABEL_CHARS = re.compile(r"[^A-Za-z0-9_]")


def normalize_label_key(key: str) -> str:
    """Make an attribute key a valid Cloud Monitoring label key."""
    key = _INVALID_LABEL_CHARS.sub("_", key)
    if key[:1].isdigit():
        return f"key_{key}"
    if key.startswith("_"):
        return f"key{key}"
    return key


class MetricTranslator:
    """Maps OpenTelemetry Metric records to Cloud Monitoring messages.

    Stateless apart from the metric type prefix; safe to share across
    threads.
    """

    def __init__(self, metric_prefix: str = DEFAULT_METRIC_PREFIX) -> None:
        self._metric_prefix = metric_prefix

    def metric_type(self, metric: Metric) -> str:
        return f"{self._metric_prefix}/{metric.name}"

    def translate(
        self, metric: Metric, resource: Resource | None, project_id: str
    ) -> list[TimeSeries]:
        """Translate one metric into a time series per data point.

        Raises:
            TranslationError: For delta temporality, exponential histograms,
                integer points outside int64 or any other data Cloud
                Monitoring cannot store.
        """
        kind = _metric_kind(metric)
        value_type = _value_type(metric)
        monitored = get_monitored_resource(resource, project_id)
        monitored_resource = monitored_resource_pb2.MonitoredResource(
            type=monitored.type, labels=dict(monitored.labels)
        )
        metric_type = self.metric_type(metric)

        series = []
        for point in metric.data.data_points:
            value = _typed_value(metric, point, value_type)
            series.append(
                TimeSeries(
                    metric=metric_pb2.Metric(
                        type=metric_type, labels=metric_labels(point.attributes)
                    ),
                    resource=monitored_resource,
                    metric_kind=kind,
                    value_type=value_type,
                    unit=metric.unit or "",
                    points=[Point(interval=_interval(point, kind), value=value)],
                )
            )
        return series

    def descriptor(self, metric: Metric) -> metric_pb2.MetricDescriptor:
        """Build the MetricDescriptor registered ahead of the metric's series.

        Raises:
            TranslationError: If the metric has no data points or an
                unsupported aggregation.
        """
        kind = _metric_kind(metric)
        points = list(metric.data.data_points)
        if not points:
            raise TranslationError(f"Metric {metric.name!r} has no data points")

        label_keys: dict[str, None] = {}
        for point in points:
            label_keys.update(dict.fromkeys(metric_labels(point.attributes)))

        return metric_pb2.MetricDescriptor(
            type=self.metric_type(metric),
            display_name=metric.name,
            description=metric.description or "",
            unit=metric.unit or "",
            metric_kind=kind,
            value_type=_value_type(metric),
            labels=[
                label_pb2.LabelDescriptor(
                    key=key, value_type=label_pb2.LabelDescriptor.STRING
                )
                for key in label_keys
            ],
        )


def metric_labels(attributes: Mapping[str, Any] | None) -> dict[str, str]:
    """Convert point attributes to label strings under the backend limits."""
    normalized: dict[str, Any] = {}
    for key, value in (attributes or {}).items():
        normalized.setdefault(normalize_label_key(key), value)

    kept, _ = collect_attributes(
        normalized, MAX_LABELS, max_key_bytes=MAX_LABEL_KEY_BYTES
    )
    return {
        key: truncate_str(stringify_value(value), MAX_LABEL_VALUE_BYTES)[0]
        for key, value in kept.items()
    }


def _metric_kind(metric: Metric) -> int:
    data = metric.data
    if isinstance(data, Gauge):
        return MetricKind.GAUGE
    if isinstance(data, (Sum, Histogram)):
        if data.aggregation_temporality != AggregationTemporality.CUMULATIVE:
            raise TranslationError(
                f"Metric {metric.name!r} uses delta temporality, "
                "only cumulative is supported"
            )
        if isinstance(data, Sum) and not data.is_monotonic:
            return MetricKind.GAUGE
        return MetricKind.CUMULATIVE
    raise TranslationError(
        f"Metric {metric.name!r} has unsupported data type {type(data).__name__}"
    )


def _value_type(metric: Metric) -> int:
    """Pick one value type for every point of a metric; any float makes it DOUBLE."""
    if isinstance(metric.data, Histogram):
        return ValueType.DISTRIBUTION
    if any(isinstance(point.value, float) for point in metric.data.data_points):
        return ValueType.DOUBLE
    return ValueType.INT64


def _typed_value(metric: Metric, point: Any, value_type: int) -> TypedValue:
    if value_type == ValueType.DISTRIBUTION:
        return TypedValue(distribution_value=_distribution(point))
    if value_type == ValueType.DOUBLE:
        return TypedValue(double_value=float(point.value))
    if not INT64_MIN <= point.value <= INT64_MAX:
        raise TranslationError(
            f"Metric {metric.name!r} has a value outside the int64 range: {point.value}"
        )
    return TypedValue(int64_value=point.value)


def _distribution(point: HistogramDataPoint) -> distribution_pb2.Distribution:
    Distribution = distribution_pb2.Distribution
    return Distribution(
        count=point.count,
        mean=point.sum / point.count if point.count else 0.0,
        bucket_options=Distribution.BucketOptions(
            explicit_buckets=Distribution.BucketOptions.Explicit(
                bounds=list(point.explicit_bounds)
            )
        ),
        bucket_counts=list(point.bucket_counts),
    )


def _interval(point: NumberDataPoint | HistogramDataPoint, kind: int) -> TimeInterval:
    end_time = to_timestamp(point.time_unix_nano)
    if kind == MetricKind.GAUGE or not point.start_time_unix_nano:
        return TimeInterval(end_time=end_time)
    return TimeInterval(
        start_time=to_timestamp(point.start_time_unix_nano), end_time=end_time
    )
