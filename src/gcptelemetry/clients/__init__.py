"""Backend clients used by the exporters to reach Google Cloud."""

from gcptelemetry.clients._base import BackendClient
from gcptelemetry.clients.cloud import GoogleCloudBackendClient

__all__ = ["BackendClient", "GoogleCloudBackendClient"]
