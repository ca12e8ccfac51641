"""
Resolver Module - Black Box Interface

Purpose: Turn an architecture tag into a reachable service endpoint
Interface: ServiceResolver.service_name(), ServiceResolver.resolve()
Hidden: service naming convention, load-balancer status parsing

Endpoints are looked up on every call and never cached.
"""

from .resolver import ServiceResolver

__all__ = ["ServiceResolver"]
