"""Cluster operations behind each route, wired from configuration."""

import json
import logging
from typing import List, Optional

from rich.console import Console
from rich.text import Text

from nginxarch.config.provider import NginxArchConfig
from nginxarch.modules.benchmark import BenchmarkRunner, BenchmarkTarget
from nginxarch.modules.cluster import KubectlClient
from nginxarch.modules.probe import HttpProbe, extract_serving_pod, highlight_pod
from nginxarch.modules.resolver import ServiceResolver
from nginxarch.modules.rollout import ConfigRollout, PodResult

logger = logging.getLogger("nginxarch.dispatch")


def _arch_text(prefix: str, arch: str, suffix: str = "") -> Text:
    return Text.assemble(prefix, (arch, "bold"), suffix)


class ClusterActions:
    """The actions both tools route to."""

    def __init__(
        self,
        config: NginxArchConfig,
        console: Console,
        client: KubectlClient,
        resolver: ServiceResolver,
        probe: HttpProbe,
        runner: BenchmarkRunner,
        rollout: ConfigRollout,
    ):
        self.config = config
        self.console = console
        self.client = client
        self.resolver = resolver
        self.http_probe = probe
        self.runner = runner
        self.rollout = rollout

    @classmethod
    def from_config(cls, config: NginxArchConfig, console: Optional[Console] = None) -> "ClusterActions":
        """Build every component from one configuration."""
        console = console or Console(soft_wrap=True)
        client = KubectlClient(config.cluster)
        return cls(
            config=config,
            console=console,
            client=client,
            resolver=ServiceResolver(client, config.cluster),
            probe=HttpProbe(config.probe),
            runner=BenchmarkRunner(config.benchmark, console),
            rollout=ConfigRollout(client, config.rollout, console),
        )

    def _announce(self, endpoint: str, verb: str, arch: str) -> None:
        self.console.print(
            _arch_text(f"Using service endpoint {endpoint} for {verb} on ", arch, " service")
        )

    def probe(self, verb: str, arch: str, params: List[int]) -> int:
        """Show which pod served a request to an architecture's service."""
        endpoint = self.resolver.resolve(arch)
        self._announce(endpoint, verb, arch)

        response = self.http_probe.fetch_first_line(endpoint)
        self.console.print("Response:")
        try:
            self.console.print_json(data=json.loads(response))
        except ValueError:
            self.console.print(response, markup=False, highlight=False)

        self.console.print(Text.assemble("Served by: ", highlight_pod(extract_serving_pod(response))))
        return 0

    def benchmark(self, verb: str, arch: str, params: List[int]) -> int:
        """Run wrk against one architecture, or the dual pair side by side."""
        defaults = [self.config.benchmark.duration_s, self.config.benchmark.connections]
        duration_s, connections = params + defaults[len(params):]

        if arch != "both":
            endpoint = self.resolver.resolve(arch)
            self._announce(endpoint, verb, arch)
            return self.runner.run_single(BenchmarkTarget(arch, endpoint), duration_s, connections)

        # Resolve everything before launching anything
        targets = [
            BenchmarkTarget(pair_arch, self.resolver.resolve(pair_arch))
            for pair_arch in self.config.benchmark.dual_pair
        ]
        for target in targets:
            self._announce(target.endpoint, verb, target.arch)
        names = " and ".join(target.arch for target in targets)
        self.console.print(
            f"Running {duration_s}s benchmark with {connections} connections "
            f"against {names} in parallel..."
        )
        results = self.runner.run_dual(targets, duration_s, connections)
        return 0 if all(result.success for result in results) else 1

    def _report_installs(self, results: List[PodResult], label: str) -> None:
        failures = [result for result in results if not result.success]
        for failure in failures:
            self.console.print(Text(f"  {failure.pod}: {failure.detail}", style="yellow"))
        if failures:
            self.console.print(
                Text(f"{label} failed on {len(failures)} of {len(results)} pods", style="yellow")
            )

    def put_config(self, verb: str, noun: str, params: List[int]) -> int:
        """Push nginx.conf, patch deployments and install btop."""
        report = self.rollout.run()
        if not report.config_applied:
            return 1

        self._report_installs(report.installs, "btop install")
        if not report.success:
            names = ", ".join(result.name for result in report.patch_failures)
            self.console.print(
                f"[red]Patch failed for {names}. A deployment that already mounts "
                f"{self.config.rollout.configmap_name} cannot be patched again.[/red]"
            )
            return 1
        if report.install_failures:
            self.console.print("[green]Custom nginx.conf applied[/green]")
        else:
            self.console.print("[green]✅ Custom nginx.conf applied and btop installed on all pods![/green]")
        return 0

    def put_btop(self, verb: str, noun: str, params: List[int]) -> int:
        """Install btop on every nginx pod, best-effort."""
        results = self.rollout.install_packages(["btop"])
        if not results:
            self.console.print("[yellow]No nginx pods found[/yellow]")
            return 0
        self._report_installs(results, "btop install")
        if all(result.success for result in results):
            self.console.print("[green]✅ btop installed on all pods![/green]")
        return 0

    def login(self, verb: str, arch: str, params: List[int]) -> int:
        """Open an interactive shell in the first pod of an architecture."""
        pods = self.client.list_pods(self.config.cluster.arch_selector(arch))
        if not pods:
            self.console.print(f"No {arch} pod found")
            return 1
        pod = pods[0]
        self.console.print(_arch_text("Connecting to ", arch, f" pod: {pod}"))
        return self.client.exec_interactive(pod)
