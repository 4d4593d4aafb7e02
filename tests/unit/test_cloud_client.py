"""Unit tests for GoogleCloudBackendClient.

A FakeServiceStub stands in for the GAPIC service clients via the
backend_stub option, so the call shape can be checked without gRPC.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any

import pytest
from google.api import metric_pb2
from google.api_core.exceptions import DeadlineExceeded, RetryError
from google.cloud.trace_v2 import Span

from gcptelemetry.clients import GoogleCloudBackendClient
from gcptelemetry.config import ExportConfiguration
from gcptelemetry.exceptions import CredentialError, RemoteError
from tests.fakes import FakeServiceStub


def stub_configuration(stub: Any, deadline: float = 10) -> ExportConfiguration:
    return (
        ExportConfiguration.builder()
        .set_project_id("proj-1")
        .set_backend_stub(stub)
        .set_deadline(deadline)
        .build()
    )


@pytest.mark.unit
class TestCallShape:
    """Tests for the arguments passed to the service client."""

    def test_submit_spans(self) -> None:
        """
        GIVEN a client backed by a stub with a 3s deadline
        WHEN spans are submitted
        THEN batch_write_spans gets the project, the spans, a 3s timeout
        AND retries disabled
        """
        stub = FakeServiceStub()
        client = GoogleCloudBackendClient(stub_configuration(stub, deadline=3))
        spans = [Span(span_id="eee19b7ec3c1b174")]

        client.submit_spans("projects/proj-1", spans)

        ((method, kwargs),) = stub.requests
        assert method == "batch_write_spans"
        assert kwargs == {
            "name": "projects/proj-1",
            "spans": spans,
            "timeout": 3.0,
            "retry": None,
        }

    def test_submit_time_series(self) -> None:
        stub = FakeServiceStub()
        client = GoogleCloudBackendClient(stub_configuration(stub))

        client.submit_time_series("projects/proj-1", [])

        ((method, kwargs),) = stub.requests
        assert method == "create_time_series"
        assert kwargs["name"] == "projects/proj-1"
        assert kwargs["time_series"] == []
        assert kwargs["timeout"] == 10.0

    def test_submit_metric_descriptor(self) -> None:
        stub = FakeServiceStub()
        client = GoogleCloudBackendClient(stub_configuration(stub))
        descriptor = metric_pb2.MetricDescriptor(type="workload.googleapis.com/x")

        client.submit_metric_descriptor("projects/proj-1", descriptor)

        ((method, kwargs),) = stub.requests
        assert method == "create_metric_descriptor"
        assert kwargs["metric_descriptor"] is descriptor


@pytest.mark.unit
class TestErrors:
    """Tests for error wrapping and credential resolution."""

    @pytest.mark.parametrize(
        "error",
        [DeadlineExceeded("too slow"), RetryError("gave up", cause=None)],
    )
    def test_api_errors_become_remote_error(self, error: Exception) -> None:
        """
        GIVEN a service client that fails the call
        WHEN spans are submitted
        THEN RemoteError is raised, chained from the API error
        """
        stub = FakeServiceStub(error=error)
        client = GoogleCloudBackendClient(stub_configuration(stub))

        with pytest.raises(RemoteError, match="batch_write_spans failed") as exc_info:
            client.submit_spans("projects/proj-1", [])

        assert exc_info.value.__cause__ is error
        assert len(stub.requests) == 1

    def test_other_errors_propagate(self) -> None:
        stub = FakeServiceStub(error=ValueError("bad request object"))
        client = GoogleCloudBackendClient(stub_configuration(stub))

        with pytest.raises(ValueError):
            client.submit_time_series("projects/proj-1", [])

    def test_missing_credentials_without_stub(self) -> None:
        config = ExportConfiguration.builder().set_project_id("proj-1").build()

        with pytest.raises(CredentialError):
            GoogleCloudBackendClient(config)

    def test_explicit_credentials_skip_discovery(self) -> None:
        config = (
            ExportConfiguration.builder()
            .set_project_id("proj-1")
            .set_credentials(object())  # type: ignore[arg-type]
            .set_deadline(timedelta(seconds=1))
            .build()
        )

        GoogleCloudBackendClient(config)


@pytest.mark.unit
class TestShutdown:
    """Tests for shutdown()."""

    def test_closes_stub_transport_once(self) -> None:
        stub = FakeServiceStub()
        client = GoogleCloudBackendClient(stub_configuration(stub))

        client.shutdown()
        client.shutdown()

        assert stub.transport.close_calls == 1

    def test_stub_without_transport(self) -> None:
        client = GoogleCloudBackendClient(stub_configuration(object()))

        client.shutdown()
