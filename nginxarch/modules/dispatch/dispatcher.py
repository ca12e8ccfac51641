"""
Verb/noun command tables for both tools and the dispatcher that routes them.

A command line is ``<verb> <noun> [params...]``. The verb and noun are
checked against a ToolSpec; integer parameters are parsed up front so the
action only ever sees valid input.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence, Tuple

from rich.console import Console
from rich.text import Text

from nginxarch.errors import NginxArchError

logger = logging.getLogger("nginxarch.dispatch")


class Actions(Protocol):
    """Operations a route can point at."""

    def probe(self, verb: str, arch: str, params: List[int]) -> int:
        ...

    def benchmark(self, verb: str, arch: str, params: List[int]) -> int:
        ...

    def put_config(self, verb: str, noun: str, params: List[int]) -> int:
        ...

    def put_btop(self, verb: str, noun: str, params: List[int]) -> int:
        ...

    def login(self, verb: str, arch: str, params: List[int]) -> int:
        ...


@dataclass(frozen=True)
class Route:
    """One verb, the nouns it accepts and the action it runs."""

    verb: str
    nouns: Tuple[str, ...]
    action: str
    # Optional positive-integer positional parameters, in order
    params: Tuple[str, ...] = ()

    def usage(self) -> str:
        extra = "".join(f" [{name}]" for name in self.params)
        return f"{self.verb} {{{'|'.join(self.nouns)}}}{extra}"


@dataclass(frozen=True)
class ToolSpec:
    """The full command table of one tool."""

    name: str
    routes: Tuple[Route, ...]
    required_tools: Tuple[str, ...] = ("kubectl",)

    @property
    def verbs(self) -> Tuple[str, ...]:
        return tuple(route.verb for route in self.routes)

    def route(self, verb: str) -> Optional[Route]:
        for route in self.routes:
            if route.verb == verb:
                return route
        return None


NGINX_UTIL = ToolSpec(
    name="nginx-util",
    routes=(
        Route("get", ("intel", "arm", "amd", "multiarch"), "probe"),
        Route("put", ("config",), "put_config"),
        Route("login", ("intel", "arm", "amd"), "login"),
    ),
)

NGINX_BENCH = ToolSpec(
    name="nginx-bench",
    routes=(
        Route("curl", ("intel", "arm", "multiarch"), "probe"),
        Route("wrk", ("intel", "arm", "multiarch", "both"), "benchmark",
              params=("duration_seconds", "connections")),
        Route("put", ("btop",), "put_btop"),
        Route("login", ("intel", "arm"), "login"),
    ),
    required_tools=("kubectl", "wrk"),
)


def quoted_choices(choices: Sequence[str]) -> str:
    """Format choices as ``'a', 'b', or 'c'``."""
    quoted = [f"'{choice}'" for choice in choices]
    if len(quoted) == 1:
        return quoted[0]
    if len(quoted) == 2:
        return f"{quoted[0]} or {quoted[1]}"
    return ", ".join(quoted[:-1]) + f", or {quoted[-1]}"


class UsageError(NginxArchError):
    """Raised for a command line that does not match the tool's table."""


def parse_params(route: Route, raw: Sequence[str]) -> List[int]:
    """Parse a route's optional positive-integer parameters."""
    if not route.params:
        # Extra words after the noun are ignored
        return []
    if len(raw) > len(route.params):
        raise UsageError(f"Too many arguments. Usage: {route.usage()}")
    values = []
    for name, text in zip(route.params, raw):
        # Plain ASCII digits only
        if not (text.isascii() and text.isdigit()) or int(text) <= 0:
            raise UsageError(f"Invalid {name} '{text}'. Use a positive integer.")
        values.append(int(text))
    return values


class Dispatcher:
    """Validate a command line and hand it to the matching action."""

    def __init__(self, tool: ToolSpec, actions: Actions, console: Optional[Console] = None):
        self.tool = tool
        self.actions = actions
        self.console = console or Console(soft_wrap=True)

    def validate(self, argv: Sequence[str]) -> Tuple[Route, str, List[int]]:
        """
        Check a command line against the tool's table.

        Raises:
            UsageError: unknown verb, unknown noun or bad parameters
        """
        verb = argv[0] if len(argv) > 0 else ""
        route = self.tool.route(verb)
        if route is None:
            raise UsageError(f"Invalid first argument. Use {quoted_choices(self.tool.verbs)}.")

        noun = argv[1] if len(argv) > 1 else ""
        if noun not in route.nouns:
            raise UsageError(f"Invalid second argument. Use {quoted_choices(route.nouns)}.")

        return route, noun, parse_params(route, argv[2:])

    def dispatch(self, argv: Sequence[str]) -> int:
        """Run a command line and return its exit status."""
        try:
            route, noun, params = self.validate(argv)
        except UsageError as e:
            self.console.print(str(e), markup=False, highlight=False)
            return 1

        logger.debug(f"{self.tool.name}: {route.verb} {noun} {params}")
        handler = getattr(self.actions, route.action)
        try:
            return handler(route.verb, noun, params)
        except NginxArchError as e:
            logger.debug(f"{route.verb} {noun} failed", exc_info=True)
            self.console.print(Text(str(e), style="red"))
            return 1
