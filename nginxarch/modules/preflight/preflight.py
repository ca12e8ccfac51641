"""External binary presence checks with install hints."""

import logging
import shutil
from typing import Callable, Dict, List, Mapping, Optional

from rich.console import Console

logger = logging.getLogger("nginxarch.preflight")

INSTALL_HINTS: Dict[str, List[str]] = {
    "kubectl": [
        "Ubuntu/Debian: sudo snap install kubectl --classic",
        "RHEL/CentOS: sudo yum install kubectl",
        "macOS: brew install kubectl",
    ],
    "wrk": [
        "Ubuntu/Debian: sudo apt-get install wrk",
        "RHEL/CentOS: sudo yum install wrk",
        "macOS: brew install wrk",
    ],
}


def find_missing(
    tools: Mapping[str, str],
    which: Optional[Callable[[str], Optional[str]]] = None,
) -> List[str]:
    """
    Return the names of tools whose binary is not on PATH.

    Args:
        tools: Tool name to binary (the binary may be a configured override)
        which: Lookup function, shutil.which by default
    """
    which = which or shutil.which
    missing = [name for name, binary in tools.items() if which(binary) is None]
    if missing:
        logger.debug(f"Missing binaries: {missing}")
    return missing


def report_missing(missing: List[str], console: Console) -> None:
    """Print the missing tools followed by install hints for each."""
    console.print(f"Error: Missing required dependencies: {' '.join(missing)}")
    console.print()
    for name in missing:
        console.print(f"Install {name}:")
        for hint in INSTALL_HINTS.get(name, [f"See the {name} documentation"]):
            console.print(f"  {hint}", markup=False)
        console.print()
