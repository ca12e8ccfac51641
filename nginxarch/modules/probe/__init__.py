"""
Probe Module - Black Box Interface

Purpose: Ask a service which backend pod answered
Interface: HttpProbe, extract_serving_pod(), pod_architecture(),
           highlight_pod(), UNABLE_TO_DETERMINE
Hidden: HTTP client, response parsing

A missing "server" field is a normal outcome, reported as
UNABLE_TO_DETERMINE rather than an error.
"""

from .probe import (
    UNABLE_TO_DETERMINE,
    HttpProbe,
    extract_serving_pod,
    highlight_pod,
    pod_architecture,
)

__all__ = [
    "UNABLE_TO_DETERMINE",
    "HttpProbe",
    "extract_serving_pod",
    "highlight_pod",
    "pod_architecture",
]
