"""Service endpoint resolution through the cluster load-balancer status."""

import logging

from nginxarch.config.provider import ClusterConfig
from nginxarch.errors import EndpointNotFoundError
from nginxarch.modules.cluster import KubectlClient

logger = logging.getLogger("nginxarch.resolver")


class ServiceResolver:
    """Resolve ``nginx-<arch>-svc`` to its load-balancer IP or hostname."""

    def __init__(self, client: KubectlClient, config: ClusterConfig):
        self.client = client
        self.config = config

    def service_name(self, arch: str) -> str:
        return self.config.service_name(arch)

    def resolve(self, arch: str) -> str:
        """
        Look up the endpoint of an architecture's service.

        Raises:
            EndpointNotFoundError: kubectl failed or the service has no
                ingress address yet
        """
        service_name = self.service_name(arch)
        result = self.client.get_service_ingress(service_name)
        if not result.success:
            raise EndpointNotFoundError(service_name, result.stderr.strip())

        # A service can report several ingress entries; the first one wins.
        addresses = result.stdout.split()
        if not addresses:
            raise EndpointNotFoundError(service_name, "load balancer has no ingress address")

        endpoint = addresses[0]
        logger.debug(f"Resolved {service_name} to {endpoint}")
        return endpoint
