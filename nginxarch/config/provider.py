"""Configuration provider for the nginxarch tools."""
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Protocol, Tuple

import yaml

from nginxarch.errors import ConfigError


@dataclass(frozen=True)
class ClusterConfig:
    """Where the nginx workloads live and how kubectl reaches them."""
    namespace: str = "nginx"
    kubectl_bin: str = "kubectl"
    service_template: str = "nginx-{arch}-svc"
    arch_label: str = "arch"
    shell: str = "/bin/bash"
    command_timeout_s: Optional[float] = None

    def service_name(self, arch: str) -> str:
        """Derive the service name for an architecture tag."""
        return self.service_template.format(arch=arch)

    def arch_selector(self, arch: str) -> str:
        """Label selector matching the pods of one architecture."""
        return f"{self.arch_label}={arch}"


@dataclass(frozen=True)
class ProbeConfig:
    """HTTP probe configuration."""
    timeout_s: float = 10.0


@dataclass(frozen=True)
class BenchmarkConfig:
    """wrk invocation defaults."""
    wrk_bin: str = "wrk"
    threads: int = 1
    duration_s: int = 30
    connections: int = 45
    dual_pair: Tuple[str, str] = ("intel", "arm")


@dataclass(frozen=True)
class RolloutConfig:
    """nginx.conf rollout and package installation settings."""
    configmap_name: str = "nginx-config"
    config_key: str = "nginx.conf"
    mount_path: str = "/etc/nginx/nginx.conf"
    deployment_filter: str = "nginx"
    install_selector: str = "app=nginx-multiarch"
    packages: Tuple[str, ...] = ("btop",)
    rollout_timeout_s: int = 120


@dataclass(frozen=True)
class NginxArchConfig:
    """Complete configuration handed to the dispatcher."""
    cluster: ClusterConfig = field(default_factory=ClusterConfig)
    probe: ProbeConfig = field(default_factory=ProbeConfig)
    benchmark: BenchmarkConfig = field(default_factory=BenchmarkConfig)
    rollout: RolloutConfig = field(default_factory=RolloutConfig)


class ConfigProvider(Protocol):
    """Protocol for configuration providers."""

    def get_cluster_config(self) -> ClusterConfig:
        """Get cluster configuration."""
        ...

    def get_probe_config(self) -> ProbeConfig:
        """Get probe configuration."""
        ...

    def get_benchmark_config(self) -> BenchmarkConfig:
        """Get benchmark configuration."""
        ...

    def get_rollout_config(self) -> RolloutConfig:
        """Get rollout configuration."""
        ...


def load_config(provider: ConfigProvider) -> NginxArchConfig:
    """Collect every section from a provider."""
    return NginxArchConfig(
        cluster=provider.get_cluster_config(),
        probe=provider.get_probe_config(),
        benchmark=provider.get_benchmark_config(),
        rollout=provider.get_rollout_config(),
    )


def _float(value: Any, name: str) -> float:
    """A positive number from a YAML scalar or environment string."""
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise ConfigError(f"{name} must be a number, got {value!r}")
    try:
        number = float(value)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {value!r}")
    if not number > 0:
        raise ConfigError(f"{name} must be positive, got {value!r}")
    return number


def _optional_float(value: Any, name: str) -> Optional[float]:
    if value is None or (isinstance(value, str) and value.strip() == ""):
        return None
    return _float(value, name)


def _int(value: Any, name: str) -> int:
    """A positive integer from a YAML scalar or environment string."""
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise ConfigError(f"{name} must be an integer, got {value!r}")
    try:
        number = int(value)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {value!r}")
    if number <= 0:
        raise ConfigError(f"{name} must be positive, got {value!r}")
    return number


class EnvConfigProvider:
    """Environment-based configuration provider."""

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        self.environ = os.environ if environ is None else environ

    def _get(self, name: str, default: Any) -> Any:
        return self.environ.get(f"NGINXARCH_{name}", default)

    def get_cluster_config(self, base: Optional[ClusterConfig] = None) -> ClusterConfig:
        """Get cluster configuration from environment variables."""
        base = base or ClusterConfig()
        timeout = self._get("KUBECTL_TIMEOUT", None)
        return ClusterConfig(
            namespace=self._get("NAMESPACE", base.namespace),
            kubectl_bin=self.environ.get("KUBECTL", base.kubectl_bin),
            service_template=self._get("SERVICE_TEMPLATE", base.service_template),
            arch_label=self._get("ARCH_LABEL", base.arch_label),
            shell=self._get("SHELL", base.shell),
            command_timeout_s=(
                _optional_float(timeout, "NGINXARCH_KUBECTL_TIMEOUT")
                if timeout is not None else base.command_timeout_s
            ),
        )

    def get_probe_config(self, base: Optional[ProbeConfig] = None) -> ProbeConfig:
        """Get probe configuration from environment variables."""
        base = base or ProbeConfig()
        timeout = self._get("PROBE_TIMEOUT", None)
        if timeout is None:
            return base
        return ProbeConfig(timeout_s=_float(timeout, "NGINXARCH_PROBE_TIMEOUT"))

    def get_benchmark_config(self, base: Optional[BenchmarkConfig] = None) -> BenchmarkConfig:
        """Get benchmark configuration from environment variables."""
        base = base or BenchmarkConfig()
        return replace(
            base,
            wrk_bin=self.environ.get("WRK", base.wrk_bin),
            threads=_int(self._get("WRK_THREADS", str(base.threads)), "NGINXARCH_WRK_THREADS"),
        )

    def get_rollout_config(self, base: Optional[RolloutConfig] = None) -> RolloutConfig:
        """Get rollout configuration from environment variables."""
        base = base or RolloutConfig()
        return replace(
            base,
            rollout_timeout_s=_int(
                self._get("ROLLOUT_TIMEOUT", str(base.rollout_timeout_s)),
                "NGINXARCH_ROLLOUT_TIMEOUT",
            ),
        )


def _coerce(kind: Any, value: Any, name: str) -> Any:
    """Check a YAML value against the type of the dataclass field it fills."""
    if kind is str:
        if not isinstance(value, str):
            raise ConfigError(f"{name} must be a string, got {value!r}")
        return value
    if kind is int:
        return _int(value, name)
    if kind is float:
        return _float(value, name)
    if kind == Optional[float]:
        return _optional_float(value, name)
    # The remaining fields are tuples of strings
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ConfigError(f"{name} must be a list of strings, got {value!r}")
    return tuple(value)


def _section(cls, data: Dict[str, Any], name: str):
    """Build a config dataclass from a YAML mapping, rejecting unknown keys."""
    raw = data.get(name) or {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Section '{name}' must be a mapping")
    known = {f.name: f.type for f in fields(cls)}
    unknown = set(raw) - set(known)
    if unknown:
        raise ConfigError(f"Unknown keys in section '{name}': {', '.join(sorted(unknown))}")
    values = {key: _coerce(known[key], value, f"{name}.{key}") for key, value in raw.items()}
    if "dual_pair" in values and len(values["dual_pair"]) != 2:
        raise ConfigError("benchmark.dual_pair must list exactly two architectures")
    return cls(**values)


class YamlConfigProvider:
    """
    YAML file configuration provider.

    The file may contain the sections ``cluster``, ``probe``, ``benchmark``
    and ``rollout``. Environment variables still override file values.
    """

    def __init__(self, path: Path, environ: Optional[Mapping[str, str]] = None):
        self.path = Path(path)
        self.env = EnvConfigProvider(environ)
        try:
            data = yaml.safe_load(self.path.read_text(encoding="utf-8")) or {}
        except FileNotFoundError:
            raise ConfigError(f"Config file not found: {self.path}")
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {self.path}: {e}")
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {self.path} must contain a mapping")
        self.data = data

    def get_cluster_config(self) -> ClusterConfig:
        """Get cluster configuration from the file, then the environment."""
        return self.env.get_cluster_config(_section(ClusterConfig, self.data, "cluster"))

    def get_probe_config(self) -> ProbeConfig:
        """Get probe configuration from the file, then the environment."""
        return self.env.get_probe_config(_section(ProbeConfig, self.data, "probe"))

    def get_benchmark_config(self) -> BenchmarkConfig:
        """Get benchmark configuration from the file, then the environment."""
        return self.env.get_benchmark_config(_section(BenchmarkConfig, self.data, "benchmark"))

    def get_rollout_config(self) -> RolloutConfig:
        """Get rollout configuration from the file, then the environment."""
        return self.env.get_rollout_config(_section(RolloutConfig, self.data, "rollout"))


def get_config_provider(environ: Optional[Mapping[str, str]] = None) -> ConfigProvider:
    """Pick the YAML provider when NGINXARCH_CONFIG points at a file."""
    environ = os.environ if environ is None else environ
    path = environ.get("NGINXARCH_CONFIG")
    if path:
        return YamlConfigProvider(Path(path), environ)
    return EnvConfigProvider(environ)
