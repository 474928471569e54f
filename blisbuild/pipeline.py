"""
Top-level build flow.

Resolve configure arguments, build BLIS unless it is already installed,
announce link directives and regenerate the bindings module. Each step
runs to completion before the next; any error propagates to the caller.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, TextIO

from blisbuild.backends.base import NativeBuildBackend
from blisbuild.bindings.generator import InterfaceGenerator
from blisbuild.bindings.parser import (
    CPreprocessor,
    HeaderParser,
    InterfaceDescription,
    PycparserHeaderParser,
)
from blisbuild.build.driver import NativeBuildDriver
from blisbuild.core.config import BuildConfiguration
from blisbuild.cross.options import resolve_configure_args
from blisbuild.link.directives import LinkDirective, LinkDirectiveEmitter

logger = logging.getLogger(__name__)


@dataclass
class BuildResult:
    """Outcome of a successful build invocation."""

    configure_args: List[str]
    built: bool
    directives: List[LinkDirective] = field(default_factory=list)
    interface: Optional[InterfaceDescription] = None


def default_header_parser(config: BuildConfiguration) -> HeaderParser:
    """Header parser preprocessing with the target's C compiler, if overridden."""
    return PycparserHeaderParser(
        include_dirs=[config.include_dir],
        preprocessor=CPreprocessor(cc=config.toolchain.get("CC")),
    )


def generate_bindings(
    config: BuildConfiguration,
    header_parser: Optional[HeaderParser] = None,
    output: Optional[Path] = None,
) -> InterfaceDescription:
    """Regenerate the bindings module from the installed header."""
    generator = InterfaceGenerator(header_parser or default_header_parser(config))
    return generator.generate(config.header_path, output or config.bindings_path)


def run_build(
    config: BuildConfiguration,
    backend: Optional[NativeBuildBackend] = None,
    header_parser: Optional[HeaderParser] = None,
    stream: Optional[TextIO] = None,
    rerun_paths: Optional[List[Path]] = None,
    manifest: Optional[Path] = None,
) -> BuildResult:
    """
    Run the whole build flow.

    Args:
        config: Assembled build configuration
        backend: Native build backend (default: autotools)
        header_parser: Header parsing engine (default: pycparser)
        stream: Where directives are written (default: stdout)
        rerun_paths: Paths announced as rerun triggers
        manifest: Optional JSON file receiving the announced directives

    Returns:
        BuildResult describing what happened

    Raises:
        BlisBuildError: On any failure; nothing is retried
    """
    # Resolved before anything touches the filesystem.
    configure_args = resolve_configure_args(config)

    driver = NativeBuildDriver(backend)
    built = driver.ensure_built(config, configure_args)

    emitter = LinkDirectiveEmitter(stream)
    emitter.emit(config, rerun_paths)

    interface = generate_bindings(config, header_parser)
    emitter.emit_bindings(config.bindings_path)

    if manifest is not None:
        emitter.write_manifest(manifest)

    return BuildResult(
        configure_args=configure_args,
        built=built,
        directives=list(emitter.emitted),
        interface=interface,
    )
