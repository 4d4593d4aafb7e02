"""Translation of OpenTelemetry spans to Cloud Trace v2 spans."""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Mapping

from google.cloud.trace_v2 import AttributeValue, Span, TruncatableString
from google.rpc import code_pb2, status_pb2
from opentelemetry.trace import SpanKind, StatusCode

from gcptelemetry._internal.attributes import (
    MAX_ATTR_VAL_BYTES,
    CoercedValue,
    collect_attributes,
    truncate_str,
)
from gcptelemetry._internal.resource import get_monitored_resource
from gcptelemetry._internal.timestamps import to_timestamp
from gcptelemetry.exceptions import TranslationError

if TYPE_CHECKING:
    from opentelemetry.sdk.trace import Event, ReadableSpan
    from opentelemetry.trace import Link

logger = logging.getLogger(__name__)

MAX_NUM_LINKS = 128
MAX_NUM_EVENTS = 32
MAX_SPAN_ATTRS = 32
MAX_EVENT_ATTRS = 4
MAX_LINK_ATTRS = 32
MAX_DISPLAY_NAME_BYTES = 128
MAX_EVENT_DESCRIPTION_BYTES = 256

SPAN_KIND_MAPPING: Mapping[SpanKind, Span.SpanKind] = MappingProxyType(
    {
        SpanKind.INTERNAL: Span.SpanKind.INTERNAL,
        SpanKind.SERVER: Span.SpanKind.SERVER,
        SpanKind.CLIENT: Span.SpanKind.CLIENT,
        SpanKind.PRODUCER: Span.SpanKind.PRODUCER,
        SpanKind.CONSUMER: Span.SpanKind.CONSUMER,
    }
)

# UNSET has no entry: spans without a status carry no status field
STATUS_CODE_MAPPING: Mapping[StatusCode, int] = MappingProxyType(
    {
        StatusCode.OK: code_pb2.OK,
        StatusCode.ERROR: code_pb2.UNKNOWN,
    }
)

_EMPTY: Mapping[str, Any] = MappingProxyType({})


class TraceTranslator:
    """Maps ReadableSpan records to Cloud Trace Span messages.

    The translator holds only the two immutable mappings it was built with,
    so translate() is a pure function of its arguments and safe to call
    from several threads.

    Args:
        attribute_mapping: OpenTelemetry keys renamed to Cloud Trace keys.
        fixed_attributes: Attributes added to every span; they override a
            span attribute with the same key.
    """

    def __init__(
        self,
        attribute_mapping: Mapping[str, str] = _EMPTY,
        fixed_attributes: Mapping[str, Any] = _EMPTY,
    ) -> None:
        self._attribute_mapping = attribute_mapping
        self._fixed_attributes = fixed_attributes

    def translate(self, span: ReadableSpan, project_id: str) -> Span:
        """Translate one span.

        Raises:
            TranslationError: If the span has no context or is missing a
                start or end time.
        """
        context = span.context
        if context is None:
            raise TranslationError(f"Span {span.name!r} has no span context")
        if span.start_time is None or span.end_time is None:
            raise TranslationError(f"Span {span.name!r} has not ended")

        trace_id = format(context.trace_id, "032x")
        span_id = format(context.span_id, "016x")

        resource_labels = get_monitored_resource(span.resource, project_id).trace_labels()
        attributes = self._attributes(
            span.attributes,
            MAX_SPAN_ATTRS,
            fixed={**resource_labels, **self._fixed_attributes},
            dropped=span.dropped_attributes,
        )

        cloud_span = Span(
            name=f"projects/{project_id}/traces/{trace_id}/spans/{span_id}",
            span_id=span_id,
            display_name=_truncatable(span.name, MAX_DISPLAY_NAME_BYTES),
            start_time=to_timestamp(span.start_time),
            end_time=to_timestamp(span.end_time),
            attributes=attributes,
            time_events=self._time_events(span.events, span.dropped_events),
            links=self._links(span.links, span.dropped_links),
            span_kind=SPAN_KIND_MAPPING.get(
                span.kind, Span.SpanKind.SPAN_KIND_UNSPECIFIED
            ),
        )

        if span.parent is not None:
            cloud_span.parent_span_id = format(span.parent.span_id, "016x")
            cloud_span.same_process_as_parent_span = not span.parent.is_remote

        status = _status(span.status.status_code, span.status.description)
        if status is not None:
            cloud_span.status = status

        return cloud_span

    def _attributes(
        self,
        attributes: Mapping[str, Any] | None,
        max_count: int,
        fixed: Mapping[str, Any] = _EMPTY,
        dropped: int = 0,
    ) -> Span.Attributes:
        kept, truncated = collect_attributes(
            attributes,
            max_count,
            mapping=self._attribute_mapping,
            fixed=fixed,
        )
        return Span.Attributes(
            attribute_map={key: _attribute_value(value) for key, value in kept.items()},
            dropped_attributes_count=truncated + dropped,
        )

    def _time_events(self, events: Any, dropped: int) -> Span.TimeEvents:
        events = list(events or ())
        time_events = [self._annotation(event) for event in events[:MAX_NUM_EVENTS]]
        return Span.TimeEvents(
            time_event=time_events,
            dropped_annotations_count=len(events) - len(time_events) + dropped,
        )

    def _annotation(self, event: Event) -> Span.TimeEvent:
        return Span.TimeEvent(
            time=to_timestamp(event.timestamp),
            annotation=Span.TimeEvent.Annotation(
                description=_truncatable(event.name, MAX_EVENT_DESCRIPTION_BYTES),
                attributes=self._attributes(event.attributes, MAX_EVENT_ATTRS),
            ),
        )

    def _links(self, links: Any, dropped: int) -> Span.Links:
        links = list(links or ())
        cloud_links = [self._link(link) for link in links[:MAX_NUM_LINKS]]
        return Span.Links(
            link=cloud_links,
            dropped_links_count=len(links) - len(cloud_links) + dropped,
        )

    def _link(self, link: Link) -> Span.Link:
        return Span.Link(
            trace_id=format(link.context.trace_id, "032x"),
            span_id=format(link.context.span_id, "016x"),
            attributes=self._attributes(link.attributes, MAX_LINK_ATTRS),
        )


def _attribute_value(value: CoercedValue) -> AttributeValue:
    if isinstance(value, bool):
        return AttributeValue(bool_value=value)
    if isinstance(value, int):
        return AttributeValue(int_value=value)
    return AttributeValue(string_value=_truncatable(value, MAX_ATTR_VAL_BYTES))


def _truncatable(value: str, limit: int) -> TruncatableString:
    truncated, truncated_bytes = truncate_str(value, limit)
    return TruncatableString(value=truncated, truncated_byte_count=truncated_bytes)


def _status(code: StatusCode, description: str | None) -> status_pb2.Status | None:
    """Map an OpenTelemetry status; unknown codes degrade to UNKNOWN."""
    if code == StatusCode.UNSET:
        return None
    return status_pb2.Status(
        code=STATUS_CODE_MAPPING.get(code, code_pb2.UNKNOWN),
        message=description or "",
    )
