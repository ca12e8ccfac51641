"""Exceptions shared by the nginxarch modules."""


class NginxArchError(Exception):
    """Base exception for failures reported to the operator."""


class ConfigError(NginxArchError):
    """Raised when a configuration file or value cannot be used."""


class EndpointNotFoundError(NginxArchError):
    """Raised when a service has no load-balancer ingress address."""

    def __init__(self, service_name: str, detail: str = ""):
        self.service_name = service_name
        self.detail = detail
        message = f"No endpoint found for service {service_name}"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class ProbeError(NginxArchError):
    """Raised when the HTTP probe cannot reach an endpoint."""


class PatchValidationError(NginxArchError):
    """Raised when a JSON patch operation is malformed."""


class BenchmarkError(NginxArchError):
    """Raised when a load generator process cannot be started."""
