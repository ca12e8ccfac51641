"""
kubectl adapter.

Every cluster interaction goes through KubectlClient.run(), which never
raises for a failing command; callers inspect the returned KubectlResult.
"""

import json
import logging
import subprocess
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from nginxarch.config.provider import ClusterConfig

from .patches import JsonPatch

logger = logging.getLogger("nginxarch.cluster")

INGRESS_JSONPATH = "{.status.loadBalancer.ingress[*]['ip', 'hostname']}"


@dataclass
class KubectlResult:
    """Outcome of one kubectl invocation."""

    args: List[str]
    return_code: int
    stdout: str = ""
    stderr: str = ""
    status: str = "SUCCESS"

    @property
    def success(self) -> bool:
        return self.return_code == 0 and self.status == "SUCCESS"

    @property
    def output(self) -> str:
        """stdout and stderr combined."""
        output = self.stdout
        if self.stderr:
            output += "\n" + self.stderr
        return output.strip()


def _strip_kind(names: str) -> List[str]:
    """Turn ``-o name`` output (``pod/foo``) into bare names."""
    result = []
    for line in names.splitlines():
        line = line.strip()
        if not line:
            continue
        result.append(line.split("/", 1)[-1])
    return result


class KubectlClient:
    """Thin, namespaced wrapper around the kubectl binary."""

    def __init__(self, config: ClusterConfig):
        self.config = config

    @property
    def namespace(self) -> str:
        return self.config.namespace

    def run(
        self,
        args: List[str],
        input_text: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> KubectlResult:
        """
        Execute a kubectl command.

        Args:
            args: kubectl command arguments
            input_text: Data written to kubectl's stdin
            timeout: Seconds before the process is killed; defaults to the
                configured command timeout (None waits forever)

        Returns:
            KubectlResult with output and status
        """
        cmd = [self.config.kubectl_bin] + args
        if timeout is None:
            timeout = self.config.command_timeout_s

        logger.debug(f"Running: {' '.join(cmd)}")

        try:
            process = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                input=input_text,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired:
            logger.error(f"Command timed out after {timeout}s: {' '.join(cmd)}")
            return KubectlResult(args=cmd, return_code=-1, stderr="Command timed out", status="TIMEOUT")
        except OSError as e:
            logger.error(f"Command execution failed: {e}")
            return KubectlResult(args=cmd, return_code=127, stderr=str(e), status="ERROR")

        status = "SUCCESS" if process.returncode == 0 else "FAILED"
        if status == "FAILED":
            logger.debug(f"kubectl exited {process.returncode}: {(process.stderr or '').strip()}")
        return KubectlResult(
            args=cmd,
            return_code=process.returncode,
            stdout=process.stdout or "",
            stderr=process.stderr or "",
            status=status,
        )

    def get_service_ingress(self, service_name: str) -> KubectlResult:
        """Read the load-balancer ingress addresses of a service."""
        return self.run([
            "get",
            "svc",
            service_name,
            "-n",
            self.namespace,
            "-o",
            f"jsonpath={INGRESS_JSONPATH}",
        ])

    def get_deployment(self, name: str) -> Optional[Dict[str, Any]]:
        """A deployment as parsed JSON, or None if it cannot be read."""
        result = self.run(["get", "deployment", name, "-n", self.namespace, "-o", "json"])
        if not result.success:
            logger.warning(f"Could not read deployment {name}: {result.stderr.strip()}")
            return None
        try:
            return json.loads(result.stdout)
        except json.JSONDecodeError as e:
            logger.warning(f"Unparseable deployment {name}: {e}")
            return None

    def list_deployments(self) -> List[str]:
        """Names of all deployments in the namespace."""
        result = self.run(["get", "deployments", "-n", self.namespace, "-o", "name"])
        if not result.success:
            logger.warning(f"Could not list deployments: {result.stderr.strip()}")
            return []
        return _strip_kind(result.stdout)

    def list_pods(self, selector: str) -> List[str]:
        """Names of pods matching a label selector, sorted."""
        result = self.run(["get", "pods", "-l", selector, "-n", self.namespace, "-o", "name"])
        if not result.success:
            logger.warning(f"Could not list pods for {selector}: {result.stderr.strip()}")
            return []
        return sorted(_strip_kind(result.stdout))

    def apply_manifest(self, manifest: str) -> KubectlResult:
        """``kubectl apply -f -`` with the manifest on stdin."""
        return self.run(["apply", "-n", self.namespace, "-f", "-"], input_text=manifest)

    def patch_deployment(self, name: str, patch: JsonPatch) -> KubectlResult:
        """Apply a JSON patch to a deployment."""
        return self.run([
            "patch",
            "deployment",
            name,
            "-n",
            self.namespace,
            "--type=json",
            "-p",
            patch.to_json(),
        ])

    def rollout_status(self, name: str, timeout_s: int) -> KubectlResult:
        """Block until a deployment finishes rolling out or the timeout passes."""
        return self.run(
            [
                "rollout",
                "status",
                f"deployment/{name}",
                "-n",
                self.namespace,
                f"--timeout={timeout_s}s",
            ],
            # kubectl enforces the rollout timeout itself; the margin covers startup
            timeout=timeout_s + 30,
        )

    def exec_in_pod(self, pod: str, command: List[str]) -> KubectlResult:
        """Run a non-interactive command inside a pod."""
        return self.run(["exec", "-n", self.namespace, pod, "--"] + command)

    def exec_interactive(self, pod: str, command: Optional[List[str]] = None) -> int:
        """
        Attach the terminal to a command inside a pod.

        Blocks until the session ends and returns its exit status.
        """
        command = command or [self.config.shell]
        cmd = [self.config.kubectl_bin, "exec", "-it", "-n", self.namespace, pod, "--"] + command
        logger.debug(f"Running interactively: {' '.join(cmd)}")
        try:
            return subprocess.run(cmd).returncode
        except OSError as e:
            logger.error(f"Could not start session: {e}")
            return 127
