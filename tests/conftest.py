"""
Shared pytest fixtures for nginxarch tests.

This module provides common fixtures including:
- KubectlMocker: Mock kubectl subprocess calls with canned responses
- PopenRecorder: Fake wrk processes for dual benchmark runs
- A rich console that records plain-text output
"""

import io
import os
import subprocess
import sys
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Pattern, Tuple, Union
from unittest.mock import MagicMock, patch

import pytest
from rich.console import Console

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from nginxarch.config.provider import NginxArchConfig

_REAL_RUN = subprocess.run


# =============================================================================
# Kubectl Mocking Infrastructure
# =============================================================================

@dataclass
class KubectlResponse:
    """Represents a mocked kubectl command response."""
    stdout: str = ""
    stderr: str = ""
    returncode: int = 0

    def to_completed_process(self) -> MagicMock:
        """Convert to a subprocess.CompletedProcess-like mock."""
        result = MagicMock()
        result.stdout = self.stdout
        result.stderr = self.stderr
        result.returncode = self.returncode
        return result


@dataclass
class KubectlCall:
    """Record of a kubectl call made during testing."""
    command: List[str]
    full_command_str: str
    matched_pattern: Optional[str] = None
    response: Optional[KubectlResponse] = None
    input: Optional[str] = None


class KubectlMocker:
    """
    Mock kubectl subprocess calls with pattern-matched responses.

    Usage:
        def test_login(kubectl_mocker):
            kubectl_mocker.register("get pods -l arch=arm", KubectlResponse(
                stdout="pod/nginx-arm-abc\\n"
            ))

            # Run code that calls kubectl
            pods = client.list_pods("arch=arm")

            # Verify the call was made
            assert kubectl_mocker.was_called_with("get pods")
    """

    def __init__(self):
        self._responses: List[Tuple[Union[str, Pattern], Any, int]] = []
        self._call_history: List[KubectlCall] = []
        self._default_response = KubectlResponse(
            stderr="Error: mock not configured for this command",
            returncode=1
        )
        self._passthrough_non_kubectl = True

    def register(
        self,
        pattern: Union[str, Pattern],
        response: Union[KubectlResponse, List[KubectlResponse]],
        priority: int = 0
    ) -> "KubectlMocker":
        """
        Register a response for commands matching the pattern.

        Args:
            pattern: String (substring match) or regex pattern
            response: KubectlResponse to return when matched, or a list
                consumed one per call (the last one repeats)
            priority: Higher priority patterns are checked first

        Returns:
            self for chaining
        """
        self._responses.append((pattern, response, priority))
        # Sort by priority (highest first)
        self._responses.sort(key=lambda x: x[2], reverse=True)
        return self

    def register_scenario(self, scenario_name: str) -> "KubectlMocker":
        """Register all responses for a named scenario."""
        from fixtures.cluster_scenarios import SCENARIOS

        if scenario_name not in SCENARIOS:
            raise ValueError(
                f"Unknown scenario: {scenario_name}. "
                f"Available: {list(SCENARIOS.keys())}"
            )

        for pattern, response in SCENARIOS[scenario_name].items():
            self.register(pattern, list(response) if isinstance(response, list) else response)

        return self

    @staticmethod
    def _pick(response: Union[KubectlResponse, List[KubectlResponse]]) -> KubectlResponse:
        if isinstance(response, list):
            return response.pop(0) if len(response) > 1 else response[0]
        return response

    def mock_run(
        self,
        cmd: List[str],
        capture_output: bool = False,
        text: bool = False,
        timeout: Optional[float] = None,
        **kwargs
    ) -> MagicMock:
        """
        Mock implementation of subprocess.run for kubectl commands.

        This method is used as a side_effect for patching subprocess.run.
        """
        cmd_str = " ".join(cmd)

        # Only intercept kubectl commands
        if os.path.basename(cmd[0]) != "kubectl":
            if self._passthrough_non_kubectl:
                return _REAL_RUN(
                    cmd,
                    capture_output=capture_output,
                    text=text,
                    timeout=timeout,
                    **kwargs
                )
            raise RuntimeError(f"Non-kubectl command blocked: {cmd_str}")

        # Find matching response
        kubectl_args = " ".join(cmd[1:])
        matched_pattern = None
        response = self._default_response

        for pattern, resp, _ in self._responses:
            if isinstance(pattern, str):
                if pattern in kubectl_args:
                    matched_pattern = pattern
                    response = self._pick(resp)
                    break
            else:  # Compiled regex
                if pattern.search(kubectl_args):
                    matched_pattern = pattern.pattern
                    response = self._pick(resp)
                    break

        # Record the call
        call = KubectlCall(
            command=cmd,
            full_command_str=cmd_str,
            matched_pattern=matched_pattern,
            response=response,
            input=kwargs.get("input"),
        )
        self._call_history.append(call)

        return response.to_completed_process()

    @property
    def calls(self) -> List[KubectlCall]:
        """Get all kubectl calls made during the test."""
        return self._call_history

    @property
    def call_count(self) -> int:
        """Get the number of kubectl calls made."""
        return len(self._call_history)

    def was_called_with(self, pattern: str) -> bool:
        """Check if any call contained the given pattern."""
        return any(pattern in call.full_command_str for call in self._call_history)

    def get_calls_matching(self, pattern: str) -> List[KubectlCall]:
        """Get all calls containing the given pattern."""
        return [c for c in self._call_history if pattern in c.full_command_str]


@pytest.fixture
def kubectl_mocker():
    """
    Fixture that provides a KubectlMocker with subprocess.run patched.

    Non-kubectl commands are blocked so a test can never start a real wrk.
    """
    mocker = KubectlMocker()
    mocker._passthrough_non_kubectl = False
    with patch("subprocess.run", side_effect=mocker.mock_run):
        yield mocker


@pytest.fixture
def kubectl_mocker_strict():
    """
    Strict kubectl mocker that fails on any unregistered command.

    Use this when you want to ensure all kubectl interactions are
    explicitly accounted for in your test.
    """
    mocker = KubectlMocker()
    mocker._passthrough_non_kubectl = False
    mocker._default_response = KubectlResponse(
        stderr="STRICT MODE: No mock registered for this command",
        returncode=127
    )
    with patch("subprocess.run", side_effect=mocker.mock_run):
        yield mocker


# =============================================================================
# wrk Process Mocking
# =============================================================================

@dataclass
class FakeProcess:
    """Stand-in for subprocess.Popen running wrk."""
    recorder: "PopenRecorder"
    argv: List[str]
    stdout: Any
    output: str
    exit_code: int
    returncode: Optional[int] = None
    terminated: bool = False

    @property
    def url(self) -> str:
        return self.argv[-1]

    def finish(self) -> None:
        if self.returncode is not None:
            return
        self.stdout.write(self.output.encode("utf-8"))
        self.stdout.flush()
        self.returncode = self.exit_code
        self.recorder.events.append(("exit", self.url))

    def wait(self, timeout: Optional[float] = None) -> int:
        self.finish()
        return self.returncode

    def poll(self) -> Optional[int]:
        return self.returncode

    def terminate(self) -> None:
        self.terminated = True
        self.returncode = -15
        self.recorder.events.append(("terminate", self.url))


@dataclass
class PopenRecorder:
    """
    Records fake wrk launches.

    ``outputs`` maps a URL to (output, exit code). URLs listed in
    ``finish_immediately`` complete as soon as they start, so a test can
    make the second target finish before the first.
    """
    outputs: Dict[str, Tuple[str, int]] = field(default_factory=dict)
    finish_immediately: List[str] = field(default_factory=list)
    fail_on: List[str] = field(default_factory=list)
    processes: List[FakeProcess] = field(default_factory=list)
    events: List[Tuple[str, str]] = field(default_factory=list)

    def __call__(self, argv, stdout=None, stderr=None, **kwargs) -> FakeProcess:
        url = argv[-1]
        if url in self.fail_on:
            raise FileNotFoundError(2, "No such file or directory", argv[0])
        output, exit_code = self.outputs.get(url, ("", 0))
        process = FakeProcess(self, list(argv), stdout, output, exit_code)
        self.processes.append(process)
        self.events.append(("start", url))
        if url in self.finish_immediately:
            process.finish()
        return process


@pytest.fixture
def popen_recorder():
    """Patch subprocess.Popen with a PopenRecorder."""
    recorder = PopenRecorder()
    with patch("subprocess.Popen", side_effect=recorder):
        yield recorder


@pytest.fixture
def isolated_tempdir(tmp_path, monkeypatch):
    """Point tempfile at an empty directory so leftovers can be detected."""
    import tempfile

    directory = tmp_path / "tmp"
    directory.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(directory))
    return directory


# =============================================================================
# Console and Configuration
# =============================================================================

@pytest.fixture
def console() -> Console:
    """A rich console writing plain text into a buffer."""
    return Console(file=io.StringIO(), width=200, color_system=None, force_terminal=False)


def console_text(console: Console) -> str:
    """Everything printed to a console fixture so far."""
    return console.file.getvalue()


@pytest.fixture
def config() -> NginxArchConfig:
    """Default configuration."""
    return NginxArchConfig()


# =============================================================================
# Test Markers Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "kubectl_mock: Tests using mocked kubectl subprocess calls"
    )
    config.addinivalue_line(
        "markers", "integration: Tests wiring several modules together"
    )
