"""
Bindings command implementation.

Regenerates the bindings module from an already installed header
without touching the native build.
"""

import logging

from blisbuild.cli.utils import assemble_config, report_error
from blisbuild.core.exceptions import BlisBuildError
from blisbuild.link.directives import LinkDirectiveEmitter
from blisbuild.pipeline import generate_bindings

logger = logging.getLogger(__name__)


def run(args) -> int:
    """Run the bindings command."""
    try:
        config = assemble_config(args)
        output = getattr(args, "output", None) or config.bindings_path
        generate_bindings(config, output=output)
    except BlisBuildError as e:
        return report_error(e)

    LinkDirectiveEmitter().emit_bindings(output)
    return 0
