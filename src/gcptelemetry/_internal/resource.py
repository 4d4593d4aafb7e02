"""Mapping of OpenTelemetry resources to Cloud Monitoring monitored resources."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Mapping

if TYPE_CHECKING:
    from opentelemetry.sdk.resources import Resource

GCE_INSTANCE = "gce_instance"
K8S_CONTAINER = "k8s_container"
GENERIC_TASK = "generic_task"


@dataclass(frozen=True)
class MonitoredResourceData:
    """A monitored resource type and its labels."""

    type: str
    labels: Mapping[str, str] = field(default_factory=dict)

    def trace_labels(self) -> dict[str, str]:
        """Return the g.co/r/{type}/{label} span attributes for this resource.

        generic_task carries no platform information and yields nothing.
        """
        if self.type == GENERIC_TASK:
            return {}
        return {
            f"g.co/r/{self.type}/{key}": value
            for key, value in self.labels.items()
            if key != "project_id" and value
        }


def get_monitored_resource(
    resource: Resource | None, project_id: str
) -> MonitoredResourceData:
    """Derive the monitored resource from OpenTelemetry resource attributes.

    Compute Engine and GKE resources map to gce_instance and k8s_container;
    anything else falls back to generic_task keyed by the service name.
    """
    attrs = dict(resource.attributes) if resource is not None else {}

    def get(key: str, default: str = "") -> str:
        value = attrs.get(key)
        return str(value) if value is not None else default

    location = get("cloud.availability_zone", get("cloud.region"))
    platform = get("cloud.platform")

    if platform == "gcp_compute_engine":
        return MonitoredResourceData(
            type=GCE_INSTANCE,
            labels={
                "project_id": project_id,
                "instance_id": get("host.id"),
                "zone": location,
            },
        )

    if platform == "gcp_kubernetes_engine":
        return MonitoredResourceData(
            type=K8S_CONTAINER,
            labels={
                "project_id": project_id,
                "location": location,
                "cluster_name": get("k8s.cluster.name"),
                "namespace_name": get("k8s.namespace.name"),
                "pod_name": get("k8s.pod.name"),
                "container_name": get("k8s.container.name"),
            },
        )

    return MonitoredResourceData(
        type=GENERIC_TASK,
        labels={
            "project_id": project_id,
            "location": location or "global",
            "namespace": get("service.namespace"),
            "job": get("service.name"),
            "task_id": get("service.instance.id"),
        },
    )
