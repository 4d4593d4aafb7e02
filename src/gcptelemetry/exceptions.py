"""Exception classes for the gcptelemetry exporters."""


class GcpTelemetryError(Exception):
    """Base class for all errors raised by gcptelemetry."""


class ConfigurationError(GcpTelemetryError):
    """Raised when exporter configuration is invalid.

    This exception is only raised from ExportConfigurationBuilder.build(),
    never while exporting.
    """


class CredentialError(GcpTelemetryError):
    """Raised when no usable Google Cloud credential can be found.

    Surfaces while the exporter (and its backend client) is being created.
    """


class TranslationError(GcpTelemetryError):
    """Raised when a telemetry record cannot be mapped to the wire format.

    Exporters catch this per record, drop the record and keep going.
    """


class RemoteError(GcpTelemetryError):
    """Raised by a backend client when the RPC fails or exceeds its deadline.

    Exporters convert this into a FAILURE result; it never reaches the
    OpenTelemetry SDK.
    """
