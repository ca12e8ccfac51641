"""
nginx.conf rollout.

Steps, each returning per-item results:
1. Render the ConfigMap and ``kubectl apply`` it (idempotent upsert)
2. Patch every matching deployment to mount it
3. Wait for the patched deployments to finish rolling out
4. Install packages inside every matching pod (best-effort)

Step 2 uses JSON patch ``add`` operations that set the whole volume and
volumeMount lists. On a deployment that already has either list the patch
would overwrite it, so such a deployment is refused and reported as a
failure; a second rollout therefore fails at this step instead of passing
silently.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import yaml
from rich.console import Console
from rich.text import Text

from nginxarch.config.provider import RolloutConfig
from nginxarch.modules.cluster import JsonPatch, KubectlClient, KubectlResult

from .nginx_conf import NGINX_CONF

logger = logging.getLogger("nginxarch.rollout")


@dataclass
class DeploymentResult:
    """Outcome of patching or waiting on one deployment."""

    name: str
    success: bool
    detail: str = ""


@dataclass
class PodResult:
    """Outcome of the package installation in one pod."""

    pod: str
    success: bool
    detail: str = ""


@dataclass
class RolloutReport:
    """Everything a rollout did, step by step."""

    config_applied: bool
    config_detail: str = ""
    patched: List[DeploymentResult] = field(default_factory=list)
    ready: List[DeploymentResult] = field(default_factory=list)
    installs: List[PodResult] = field(default_factory=list)

    @property
    def patch_failures(self) -> List[DeploymentResult]:
        return [r for r in self.patched if not r.success]

    @property
    def install_failures(self) -> List[PodResult]:
        return [r for r in self.installs if not r.success]

    @property
    def success(self) -> bool:
        """Config applied and every deployment patched; installs do not count."""
        return self.config_applied and not self.patch_failures


def render_configmap(name: str, namespace: str, key: str, content: str) -> str:
    """Render a ConfigMap manifest holding one file."""
    manifest: Dict[str, object] = {
        "apiVersion": "v1",
        "kind": "ConfigMap",
        "metadata": {"name": name, "namespace": namespace},
        "data": {key: content},
    }
    return yaml.safe_dump(manifest, sort_keys=False)


def build_mount_patch(config: RolloutConfig) -> JsonPatch:
    """Patch adding the ConfigMap volume and mounting it in the first container."""
    volume_name = config.configmap_name
    return (
        JsonPatch()
        .add(
            "/spec/template/spec/volumes",
            [{"name": volume_name, "configMap": {"name": config.configmap_name}}],
        )
        .add(
            "/spec/template/spec/containers/0/volumeMounts",
            [{"name": volume_name, "mountPath": config.mount_path, "subPath": config.config_key}],
        )
    )


def mount_conflict(deployment: Dict[str, Any], config: RolloutConfig) -> Optional[str]:
    """Why a deployment cannot take the mount patch, or None if it can."""
    pod_spec = deployment.get("spec", {}).get("template", {}).get("spec", {})
    containers = pod_spec.get("containers") or []
    if not containers:
        return "deployment has no containers"
    volumes = pod_spec.get("volumes") or []
    mounts = containers[0].get("volumeMounts") or []
    if any(volume.get("name") == config.configmap_name for volume in volumes):
        return f"volume {config.configmap_name} already exists (already patched?)"
    if volumes:
        return "/spec/template/spec/volumes already exists"
    if mounts:
        return "/spec/template/spec/containers/0/volumeMounts already exists"
    return None


def _last_line(result: KubectlResult) -> str:
    lines = result.output.splitlines()
    return lines[-1] if lines else ""


class ConfigRollout:
    """Push nginx.conf to the cluster and roll it out."""

    def __init__(
        self,
        client: KubectlClient,
        config: RolloutConfig,
        console: Optional[Console] = None,
        nginx_conf: str = NGINX_CONF,
    ):
        self.client = client
        self.config = config
        self.console = console or Console(soft_wrap=True)
        self.nginx_conf = nginx_conf

    def push_config(self) -> KubectlResult:
        """Create or update the ConfigMap."""
        manifest = render_configmap(
            self.config.configmap_name,
            self.client.namespace,
            self.config.config_key,
            self.nginx_conf,
        )
        result = self.client.apply_manifest(manifest)
        if result.success:
            logger.info(f"ConfigMap {self.config.configmap_name} applied")
        else:
            logger.error(f"ConfigMap apply failed: {result.stderr.strip()}")
        return result

    def target_deployments(self) -> List[str]:
        return [
            name for name in self.client.list_deployments()
            if self.config.deployment_filter in name
        ]

    def patch_deployments(self) -> List[DeploymentResult]:
        """Mount the ConfigMap into every matching deployment."""
        patch = build_mount_patch(self.config)
        results = []
        for name in self.target_deployments():
            self.console.print(f"Updating {name}...")
            deployment = self.client.get_deployment(name)
            if deployment is None:
                detail = f"could not read deployment {name}"
            else:
                detail = mount_conflict(deployment, self.config)
            if detail is None:
                result = self.client.patch_deployment(name, patch)
                if result.success:
                    results.append(DeploymentResult(name=name, success=True))
                    continue
                detail = _last_line(result)

            logger.error(f"Patch of {name} failed: {detail}")
            self.console.print(Text(f"Failed to patch {name}: {detail}", style="red"))
            results.append(DeploymentResult(name=name, success=False, detail=detail))
        return results

    def wait_for_rollout(self, names: List[str]) -> List[DeploymentResult]:
        """Wait for each deployment's rollout, bounded by the configured timeout."""
        if names:
            self.console.print("Waiting for pods to restart with new configuration...")
        results = []
        for name in names:
            result = self.client.rollout_status(name, self.config.rollout_timeout_s)
            if result.success:
                results.append(DeploymentResult(name=name, success=True))
            else:
                detail = _last_line(result)
                logger.warning(f"Rollout of {name} not confirmed: {detail}")
                self.console.print(Text(f"Rollout of {name} not confirmed: {detail}", style="yellow"))
                results.append(DeploymentResult(name=name, success=False, detail=detail))
        return results

    def install_packages(self, packages: Optional[List[str]] = None) -> List[PodResult]:
        """
        Install packages with apt-get in every pod matching the install selector.

        Failures are recorded per pod and never raised.
        """
        packages = list(packages or self.config.packages)
        label = " ".join(packages)
        self.console.print(f"Installing {label} on all nginx pods...")
        results = []
        for pod in self.client.list_pods(self.config.install_selector):
            self.console.print(f"Installing {label} on {pod}...")
            update = self.client.exec_in_pod(pod, ["apt-get", "update", "-y"])
            install = self.client.exec_in_pod(pod, ["apt-get", "install", "-y"] + packages)
            if install.success:
                self.console.print(f"[green]✓[/green] {label} installed on {pod}")
                results.append(PodResult(pod=pod, success=True))
                continue
            detail = _last_line(install) or _last_line(update)
            logger.warning(f"Install on {pod} failed: {detail}")
            self.console.print(f"[yellow]✗ {label} install failed on {pod}[/yellow]")
            results.append(PodResult(pod=pod, success=False, detail=detail))
        return results

    def run(self) -> RolloutReport:
        """Run all four steps."""
        self.console.print("Applying custom nginx.conf to all nginx pods...")
        applied = self.push_config()
        report = RolloutReport(config_applied=applied.success, config_detail=_last_line(applied))
        if not applied.success:
            self.console.print(Text(f"Failed to apply ConfigMap: {report.config_detail}", style="red"))
            return report

        report.patched = self.patch_deployments()
        report.ready = self.wait_for_rollout([r.name for r in report.patched if r.success])
        report.installs = self.install_packages()
        return report
