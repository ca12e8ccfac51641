"""HTTP probe against a service endpoint and serving-pod extraction."""

import logging
import re
from typing import Optional

import httpx
from rich.text import Text

from nginxarch.config.provider import ProbeConfig
from nginxarch.errors import ProbeError

logger = logging.getLogger("nginxarch.probe")

UNABLE_TO_DETERMINE = "Unable to determine"

_SERVER_FIELD = re.compile(r'"server"\s*:\s*"(?P<server>[^"]*)"')
_POD_ARCH = re.compile(r"^nginx-(?P<arch>[^-]*)-")


class HttpProbe:
    """Issue a single GET against ``http://<endpoint>/``."""

    def __init__(self, config: ProbeConfig, transport: Optional[httpx.BaseTransport] = None):
        self.config = config
        self.transport = transport

    def fetch_first_line(self, endpoint: str) -> str:
        """
        Fetch the root document and return the first line of its body.

        The status code is not checked; whatever the server sends back is
        what the operator sees.

        Raises:
            ProbeError: the endpoint could not be reached
        """
        url = f"http://{endpoint}/"
        logger.debug(f"GET {url}")
        try:
            with httpx.Client(timeout=self.config.timeout_s, transport=self.transport) as client:
                response = client.get(url)
        except httpx.HTTPError as e:
            raise ProbeError(f"Request to {url} failed: {e}") from e

        lines = response.text.splitlines()
        return lines[0] if lines else ""


def extract_serving_pod(text: str) -> str:
    """Return the ``server`` value of a probe response, or UNABLE_TO_DETERMINE."""
    match = _SERVER_FIELD.search(text or "")
    if not match or not match.group("server"):
        return UNABLE_TO_DETERMINE
    return match.group("server")


def pod_architecture(pod_name: str) -> Optional[str]:
    """Architecture embedded in ``nginx-<arch>-<suffix>``, if any."""
    match = _POD_ARCH.match(pod_name or "")
    return match.group("arch") if match else None


def highlight_pod(pod_name: str) -> Text:
    """Render a pod name with its architecture in bold."""
    arch = pod_architecture(pod_name)
    if not arch:
        return Text(pod_name)
    prefix = f"nginx-{arch}"
    return Text.assemble("nginx-", (arch, "bold"), pod_name[len(prefix):])
