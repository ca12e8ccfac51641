"""
Dispatch Module - Black Box Interface

Purpose: Map verb/noun command lines onto cluster operations
Interface: Route, ToolSpec, NGINX_UTIL, NGINX_BENCH, Dispatcher, ClusterActions
Hidden: usage messages, positional parameter parsing, component wiring

Command lines are validated against static tables before any action runs;
invalid input never reaches a collaborator.
"""

from .actions import ClusterActions
from .dispatcher import NGINX_BENCH, NGINX_UTIL, Dispatcher, Route, ToolSpec

__all__ = ["ClusterActions", "Dispatcher", "NGINX_BENCH", "NGINX_UTIL", "Route", "ToolSpec"]
