"""Exception hierarchy for the telemetry reporter."""


class TelemetryError(Exception):
    """Base class for all telemetry errors."""


class StatusDecodeError(TelemetryError, ValueError):
    """Wire data does not describe a valid DeviceStatus."""


class TransportError(TelemetryError):
    """The collector could not be reached or its reply could not be read."""


class ResponseDecodeError(TransportError, ValueError):
    """Response body is not a JSON-RPC 2.0 envelope."""
