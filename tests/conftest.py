"""Shared pytest configuration and fixtures.

This module provides test fixtures that:
1. Isolate tests from the ambient Google Cloud environment (project
   environment variables and application default credentials) and from
   process-wide exporter state
2. Build real OpenTelemetry SDK records (ReadableSpan, MetricsData)
3. Provide typed fakes (FakeBackendClient) instead of MagicMock
"""

from __future__ import annotations

from typing import Any, Callable, Generator, Sequence

import google.auth
import pytest
from google.auth.exceptions import DefaultCredentialsError
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import Event, ReadableSpan
from opentelemetry.trace import Link, SpanContext, SpanKind, Status, StatusCode

from gcptelemetry._internal.discovery import PROJECT_ID_ENV_VARS
from gcptelemetry.config import ExportConfiguration
from gcptelemetry.exporters.metrics import exporter as metrics_exporter
from tests.fakes import FakeBackendClient
from tests.records import END_TIME, SPAN_ID, START_TIME, span_context


@pytest.fixture(autouse=True)
def isolate_ambient_environment(
    monkeypatch: pytest.MonkeyPatch,
) -> Generator[None, None, None]:
    """Hide project environment variables and application default credentials.

    Tests that need ambient discovery set the variables or patch
    google.auth.default themselves.
    """
    for var_name in PROJECT_ID_ENV_VARS:
        monkeypatch.delenv(var_name, raising=False)

    def no_default_credentials(*args: Any, **kwargs: Any) -> Any:
        raise DefaultCredentialsError("no credentials in tests")

    monkeypatch.setattr(google.auth, "default", no_default_credentials)
    yield


@pytest.fixture(autouse=True)
def reset_sent_descriptors(monkeypatch: pytest.MonkeyPatch) -> None:
    """Give every test an empty process-wide SEND_ONCE descriptor registry."""
    monkeypatch.setattr(metrics_exporter, "_sent_descriptors", set())


@pytest.fixture
def configuration() -> ExportConfiguration:
    """Return a configuration for proj-1 with all defaults."""
    return ExportConfiguration.builder().set_project_id("proj-1").build()


@pytest.fixture
def bare_configuration() -> ExportConfiguration:
    """Return a configuration for proj-1 without mapping or fixed attributes."""
    return (
        ExportConfiguration.builder()
        .set_project_id("proj-1")
        .set_attribute_mapping({})
        .set_fixed_attributes({})
        .build()
    )


@pytest.fixture
def fake_client() -> FakeBackendClient:
    """Provide a FakeBackendClient that records submitted batches."""
    return FakeBackendClient()


@pytest.fixture
def make_span() -> Callable[..., ReadableSpan]:
    """Return a factory for finished ReadableSpan records.

    Usage:
        def test_something(make_span):
            span = make_span(name="op", attributes={"http.status_code": 200})
    """

    def factory(
        name: str = "op",
        attributes: dict[str, Any] | None = None,
        events: Sequence[Event] = (),
        links: Sequence[Link] = (),
        kind: SpanKind = SpanKind.INTERNAL,
        status: Status | None = None,
        parent: SpanContext | None = None,
        resource: Resource | None = None,
        span_id: int = SPAN_ID,
        start_time: int | None = START_TIME,
        end_time: int | None = END_TIME,
    ) -> ReadableSpan:
        return ReadableSpan(
            name=name,
            context=span_context(span_id=span_id),
            parent=parent,
            resource=resource,
            attributes=attributes or {},
            events=events,
            links=links,
            kind=kind,
            status=status or Status(StatusCode.UNSET),
            start_time=start_time,
            end_time=end_time,
        )

    return factory
