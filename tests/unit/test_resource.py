"""Unit tests for monitored resource detection."""

from __future__ import annotations

import pytest
from opentelemetry.sdk.resources import Resource

from gcptelemetry._internal.resource import (
    GCE_INSTANCE,
    GENERIC_TASK,
    K8S_CONTAINER,
    get_monitored_resource,
)


@pytest.mark.unit
class TestGetMonitoredResource:
    """Tests for get_monitored_resource()."""

    def test_compute_engine(self) -> None:
        """
        GIVEN a resource detected on Compute Engine
        WHEN the monitored resource is derived
        THEN it is a gce_instance with instance id and zone
        """
        resource = Resource(
            {
                "cloud.platform": "gcp_compute_engine",
                "host.id": "4567",
                "cloud.availability_zone": "us-east1-b",
            }
        )

        monitored = get_monitored_resource(resource, "proj-1")

        assert monitored.type == GCE_INSTANCE
        assert dict(monitored.labels) == {
            "project_id": "proj-1",
            "instance_id": "4567",
            "zone": "us-east1-b",
        }

    def test_kubernetes_engine(self) -> None:
        resource = Resource(
            {
                "cloud.platform": "gcp_kubernetes_engine",
                "cloud.region": "europe-west1",
                "k8s.cluster.name": "prod",
                "k8s.namespace.name": "shop",
                "k8s.pod.name": "checkout-7d9",
                "k8s.container.name": "app",
            }
        )

        monitored = get_monitored_resource(resource, "proj-1")

        assert monitored.type == K8S_CONTAINER
        assert monitored.labels["location"] == "europe-west1"
        assert monitored.labels["cluster_name"] == "prod"
        assert monitored.labels["container_name"] == "app"

    def test_generic_task_fallback(self) -> None:
        """
        GIVEN a resource with only service attributes
        WHEN the monitored resource is derived
        THEN it is a generic_task in the global location
        """
        resource = Resource({"service.name": "checkout", "service.instance.id": "i-1"})

        monitored = get_monitored_resource(resource, "proj-1")

        assert monitored.type == GENERIC_TASK
        assert monitored.labels["job"] == "checkout"
        assert monitored.labels["task_id"] == "i-1"
        assert monitored.labels["location"] == "global"

    def test_missing_resource(self) -> None:
        monitored = get_monitored_resource(None, "proj-1")

        assert monitored.type == GENERIC_TASK
        assert monitored.labels["project_id"] == "proj-1"


@pytest.mark.unit
class TestTraceLabels:
    """Tests for the span attributes derived from a monitored resource."""

    def test_platform_labels_exclude_project_and_empty_values(self) -> None:
        resource = Resource(
            {"cloud.platform": "gcp_compute_engine", "host.id": "4567"}
        )

        labels = get_monitored_resource(resource, "proj-1").trace_labels()

        assert labels == {"g.co/r/gce_instance/instance_id": "4567"}

    def test_generic_task_has_no_trace_labels(self) -> None:
        resource = Resource({"service.name": "checkout"})

        assert get_monitored_resource(resource, "proj-1").trace_labels() == {}
