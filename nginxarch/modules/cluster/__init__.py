"""
Cluster Module - Black Box Interface

Purpose: Talk to the Kubernetes control plane
Interface: KubectlClient, KubectlResult, JsonPatch, PatchOperation
Hidden: kubectl argv construction, output parsing, patch serialization

Can be replaced with a direct Kubernetes API client without touching callers.
"""

from .client import KubectlClient, KubectlResult
from .patches import JsonPatch, PatchOperation

__all__ = ["KubectlClient", "KubectlResult", "JsonPatch", "PatchOperation"]
