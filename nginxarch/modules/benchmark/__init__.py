"""
Benchmark Module - Black Box Interface

Purpose: Drive wrk against one or two service endpoints
Interface: WrkInvocation, BenchmarkRunner.run_single(), BenchmarkRunner.run_dual(),
           BenchmarkTarget, BenchmarkOutput
Hidden: process management, temporary output capture

Dual runs execute as two independent OS processes; results are always
reported in target order, never completion order.
"""

from .runner import BenchmarkOutput, BenchmarkRunner, BenchmarkTarget, WrkInvocation

__all__ = ["BenchmarkOutput", "BenchmarkRunner", "BenchmarkTarget", "WrkInvocation"]
