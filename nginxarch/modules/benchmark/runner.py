"""wrk invocations in single and dual (side-by-side) mode."""

import logging
import os
import subprocess
import tempfile
from dataclasses import dataclass
from typing import IO, List, Optional, Sequence, Tuple

from rich.console import Console

from nginxarch.config.provider import BenchmarkConfig
from nginxarch.errors import BenchmarkError

logger = logging.getLogger("nginxarch.benchmark")


@dataclass(frozen=True)
class WrkInvocation:
    """One wrk command line."""

    url: str
    duration_s: int
    connections: int
    threads: int = 1
    wrk_bin: str = "wrk"

    def argv(self) -> List[str]:
        return [
            self.wrk_bin,
            f"-t{self.threads}",
            f"-c{self.connections}",
            f"-d{self.duration_s}s",
            self.url,
        ]


@dataclass(frozen=True)
class BenchmarkTarget:
    """An architecture and the endpoint its service resolved to."""

    arch: str
    endpoint: str

    @property
    def url(self) -> str:
        return f"http://{self.endpoint}/"


@dataclass
class BenchmarkOutput:
    """Captured result of one wrk process."""

    arch: str
    return_code: int
    output: str

    @property
    def success(self) -> bool:
        return self.return_code == 0


class BenchmarkRunner:
    """Launch wrk processes and report their output."""

    def __init__(self, config: BenchmarkConfig, console: Optional[Console] = None):
        self.config = config
        self.console = console or Console(soft_wrap=True)

    def invocation(self, target: BenchmarkTarget, duration_s: int, connections: int) -> WrkInvocation:
        return WrkInvocation(
            url=target.url,
            duration_s=duration_s,
            connections=connections,
            threads=self.config.threads,
            wrk_bin=self.config.wrk_bin,
        )

    def run_single(self, target: BenchmarkTarget, duration_s: int, connections: int) -> int:
        """Run wrk in the foreground with output streamed to the terminal."""
        argv = self.invocation(target, duration_s, connections).argv()
        logger.info(f"Running: {' '.join(argv)}")
        try:
            return subprocess.run(argv).returncode
        except OSError as e:
            logger.error(f"Could not start wrk: {e}")
            self.console.print(f"[red]Could not start {argv[0]}: {e}[/red]")
            return 127

    def run_dual(
        self,
        targets: Sequence[BenchmarkTarget],
        duration_s: int,
        connections: int,
    ) -> List[BenchmarkOutput]:
        """
        Run one wrk process per target concurrently.

        Each process writes stdout and stderr to its own temporary file.
        Once every process has exited the captured outputs are printed in
        target order, and the temporary files are removed on every exit
        path.

        Returns:
            One BenchmarkOutput per target, in target order
        """
        invocations = [self.invocation(t, duration_s, connections) for t in targets]
        captures: List[Tuple[str, IO[bytes]]] = []
        processes: List[subprocess.Popen] = []
        try:
            for target, invocation in zip(targets, invocations):
                fd, path = tempfile.mkstemp(prefix=f"wrk-{target.arch}-", suffix=".log")
                handle = os.fdopen(fd, "wb")
                captures.append((path, handle))
                argv = invocation.argv()
                logger.info(f"Starting: {' '.join(argv)}")
                try:
                    process = subprocess.Popen(argv, stdout=handle, stderr=subprocess.STDOUT)
                except OSError as e:
                    raise BenchmarkError(f"Could not start {argv[0]}: {e}") from e
                processes.append(process)

            return_codes = [process.wait() for process in processes]

            results = []
            for target, (path, handle), return_code in zip(targets, captures, return_codes):
                handle.close()
                with open(path, "rb") as f:
                    output = f.read().decode("utf-8", errors="replace")
                if return_code != 0:
                    logger.warning(f"wrk for {target.arch} exited with {return_code}")
                results.append(BenchmarkOutput(arch=target.arch, return_code=return_code, output=output))

            for result in results:
                self.console.print()
                self.console.print(f"[bold]{result.arch.upper()} RESULTS[/bold]")
                self.console.print(result.output.rstrip("\n"), markup=False, highlight=False)
            return results
        finally:
            for process in processes:
                if process.poll() is None:
                    process.terminate()
                    process.wait()
            for path, handle in captures:
                handle.close()
                try:
                    os.unlink(path)
                except FileNotFoundError:
                    pass
