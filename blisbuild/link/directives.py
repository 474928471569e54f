"""
Link directives announced to the invoking build system.

Directives are written to stdout, one per line, as
``blisbuild:<key>=<value>``. They are emitted on every invocation,
whether or not a build ran, because consumers re-read them each time.
"""

import json
import logging
import sys
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import List, Optional, TextIO

from blisbuild.core.config import LIBRARY_NAME, BuildConfiguration
from blisbuild.core.filesystem import atomic_write

logger = logging.getLogger(__name__)

DIRECTIVE_PREFIX = "blisbuild"

# The blisbuild package itself is the build logic consumers depend on.
BUILD_LOGIC_PATH = Path(__file__).resolve().parent.parent


@dataclass(frozen=True)
class LinkDirective:
    """A single ``key=value`` directive."""

    key: str
    value: str

    def render(self) -> str:
        return f"{DIRECTIVE_PREFIX}:{self.key}={self.value}"


def link_kind(config: BuildConfiguration) -> str:
    return "static" if config.is_static else "dylib"


def link_directives(
    config: BuildConfiguration, rerun_paths: Optional[List[Path]] = None
) -> List[LinkDirective]:
    """
    Compute the link directives for a configuration.

    Args:
        config: Build configuration
        rerun_paths: Paths whose change should trigger a rerun
            (default: the blisbuild package)

    Returns:
        Directives in announcement order
    """
    directives = [
        LinkDirective("link-search", f"native={config.lib_dir}"),
        LinkDirective("include", str(config.include_dir)),
        LinkDirective("link-lib", f"{link_kind(config)}={LIBRARY_NAME}"),
    ]
    for path in rerun_paths or [BUILD_LOGIC_PATH]:
        directives.append(LinkDirective("rerun-if-changed", str(path)))
    return directives


class LinkDirectiveEmitter:
    """
    Write directives to a stream and remember what was announced.

    Args:
        stream: Output stream (default: stdout)
    """

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream
        self.emitted: List[LinkDirective] = []

    def emit(
        self, config: BuildConfiguration, rerun_paths: Optional[List[Path]] = None
    ) -> List[LinkDirective]:
        directives = link_directives(config, rerun_paths)
        for directive in directives:
            self._write(directive)
        return directives

    def emit_bindings(self, path: Path) -> LinkDirective:
        directive = LinkDirective("bindings", str(path))
        self._write(directive)
        return directive

    def write_manifest(self, path: Path) -> None:
        """Write everything announced so far as a JSON list."""
        content = json.dumps([asdict(d) for d in self.emitted], indent=2)
        atomic_write(path, content + "\n")
        logger.debug(f"Wrote link manifest to {path}")

    def _write(self, directive: LinkDirective) -> None:
        stream = self.stream or sys.stdout
        print(directive.render(), file=stream)
        self.emitted.append(directive)
