"""
Rollout Module - Black Box Interface

Purpose: Push the tuned nginx.conf into running nginx deployments
Interface: ConfigRollout, RolloutReport, DeploymentResult, PodResult,
           render_configmap(), build_mount_patch(), mount_conflict(),
           NGINX_CONF
Hidden: manifest rendering, patch construction, readiness polling

Every step returns per-item results; deciding whether a partial failure is
acceptable is left to the caller.
"""

from .nginx_conf import NGINX_CONF
from .rollout import (
    ConfigRollout,
    DeploymentResult,
    PodResult,
    RolloutReport,
    build_mount_patch,
    mount_conflict,
    render_configmap,
)

__all__ = [
    "NGINX_CONF",
    "ConfigRollout",
    "DeploymentResult",
    "PodResult",
    "RolloutReport",
    "build_mount_patch",
    "mount_conflict",
    "render_configmap",
]
