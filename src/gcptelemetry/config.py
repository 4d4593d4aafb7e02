"""Export configuration for the Cloud Trace and Cloud Monitoring exporters."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from datetime import timedelta
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Mapping

from opentelemetry.sdk.version import __version__ as otel_version

from gcptelemetry import __version__
from gcptelemetry._internal.discovery import discover_project_id
from gcptelemetry.exceptions import ConfigurationError

if TYPE_CHECKING:
    from google.auth.credentials import Credentials

logger = logging.getLogger(__name__)

DEFAULT_DEADLINE = timedelta(seconds=10)

DEFAULT_METRIC_PREFIX = "workload.googleapis.com"

AGENT_LABEL_KEY = "g.co/agent"

# Well-known OpenTelemetry keys and the Cloud Trace keys they are shown as
DEFAULT_ATTRIBUTE_MAPPING: Mapping[str, str] = MappingProxyType(
    {
        "http.scheme": "/http/client_protocol",
        "http.host": "/http/host",
        "http.method": "/http/method",
        "http.route": "/http/route",
        "http.target": "/http/path",
        "http.url": "/http/url",
        "http.status_code": "/http/status_code",
        "http.user_agent": "/http/user_agent",
        "http.request_content_length": "/http/request/size",
        "http.response_content_length": "/http/response/size",
    }
)

DEFAULT_FIXED_ATTRIBUTES: Mapping[str, Any] = MappingProxyType(
    {
        AGENT_LABEL_KEY: (
            f"opentelemetry-python {otel_version}; "
            f"google-cloud-trace-exporter {__version__}"
        ),
    }
)


class DescriptorStrategy(enum.Enum):
    """How often metric descriptors are registered with Cloud Monitoring."""

    SEND_ONCE = "send_once"
    ALWAYS_SEND = "always_send"
    NEVER_SEND = "never_send"


@dataclass(frozen=True)
class ExportConfiguration:
    """Immutable options consumed by the exporters.

    Build instances with ExportConfiguration.builder() so that defaults
    and validation are applied.
    """

    project_id: str
    credentials: Credentials | None = None
    # Pre-configured service client used instead of building one
    backend_stub: Any = None
    deadline: timedelta = DEFAULT_DEADLINE
    descriptor_strategy: DescriptorStrategy = DescriptorStrategy.SEND_ONCE
    attribute_mapping: Mapping[str, str] = field(
        default_factory=lambda: DEFAULT_ATTRIBUTE_MAPPING
    )
    fixed_attributes: Mapping[str, Any] = field(
        default_factory=lambda: DEFAULT_FIXED_ATTRIBUTES
    )
    metric_prefix: str = DEFAULT_METRIC_PREFIX

    @property
    def deadline_seconds(self) -> float:
        """Return the deadline as the float timeout GAPIC calls expect."""
        return self.deadline.total_seconds()

    @property
    def resource_name(self) -> str:
        """Return the backend resource name, projects/{project_id}."""
        return f"projects/{self.project_id}"

    @staticmethod
    def builder() -> ExportConfigurationBuilder:
        """Return a builder seeded with the ambient project id and defaults."""
        return ExportConfigurationBuilder(project_id=discover_project_id())


class ExportConfigurationBuilder:
    """Fluent builder for ExportConfiguration.

    Example:
        >>> config = (
        ...     ExportConfiguration.builder()
        ...     .set_project_id("my-project")
        ...     .set_deadline(timedelta(seconds=5))
        ...     .build()
        ... )
    """

    def __init__(self, project_id: str | None = None) -> None:
        self._project_id = project_id
        self._credentials: Credentials | None = None
        self._backend_stub: Any = None
        self._deadline: timedelta = DEFAULT_DEADLINE
        self._descriptor_strategy = DescriptorStrategy.SEND_ONCE
        self._attribute_mapping: Mapping[str, str] = DEFAULT_ATTRIBUTE_MAPPING
        self._fixed_attributes: Mapping[str, Any] = DEFAULT_FIXED_ATTRIBUTES
        self._metric_prefix = DEFAULT_METRIC_PREFIX

    def set_project_id(self, project_id: str | None) -> ExportConfigurationBuilder:
        self._project_id = project_id
        return self

    def set_credentials(
        self, credentials: Credentials | None
    ) -> ExportConfigurationBuilder:
        self._credentials = credentials
        return self

    def set_backend_stub(self, backend_stub: Any) -> ExportConfigurationBuilder:
        self._backend_stub = backend_stub
        return self

    def set_deadline(self, deadline: timedelta | float) -> ExportConfigurationBuilder:
        """Set the per-RPC deadline, as a timedelta or a number of seconds."""
        if not isinstance(deadline, timedelta):
            deadline = timedelta(seconds=deadline)
        self._deadline = deadline
        return self

    def set_descriptor_strategy(
        self, strategy: DescriptorStrategy
    ) -> ExportConfigurationBuilder:
        self._descriptor_strategy = strategy
        return self

    def set_attribute_mapping(
        self, mapping: Mapping[str, str]
    ) -> ExportConfigurationBuilder:
        self._attribute_mapping = mapping
        return self

    def set_fixed_attributes(
        self, attributes: Mapping[str, Any]
    ) -> ExportConfigurationBuilder:
        self._fixed_attributes = attributes
        return self

    def set_metric_prefix(self, prefix: str) -> ExportConfigurationBuilder:
        self._metric_prefix = prefix
        return self

    def build(self) -> ExportConfiguration:
        """Validate the options and return an immutable ExportConfiguration.

        Raises:
            ConfigurationError: If no project id could be resolved or the
                deadline is not strictly positive.
        """
        errors = _validate(self._project_id, self._deadline)
        if errors:
            raise ConfigurationError(
                f"Configuration validation failed: {'; '.join(errors)}"
            )

        config = ExportConfiguration(
            project_id=self._project_id,  # type: ignore[arg-type]
            credentials=self._credentials,
            backend_stub=self._backend_stub,
            deadline=self._deadline,
            descriptor_strategy=self._descriptor_strategy,
            attribute_mapping=MappingProxyType(dict(self._attribute_mapping)),
            fixed_attributes=MappingProxyType(dict(self._fixed_attributes)),
            metric_prefix=self._metric_prefix.rstrip("/"),
        )
        logger.debug(
            "Export configuration built for project %s (deadline=%ss, strategy=%s)",
            config.project_id,
            config.deadline_seconds,
            config.descriptor_strategy.name,
        )
        return config


def _validate(project_id: str | None, deadline: timedelta) -> list[str]:
    """Validate builder options and return a list of error messages."""
    errors: list[str] = []

    if not project_id:
        errors.append(
            "Cannot find a project ID from either configuration or "
            "application default"
        )

    if deadline <= timedelta(0):
        errors.append("Deadline must be positive")

    return errors
