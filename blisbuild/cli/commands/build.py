"""
Build command implementation.

Builds BLIS if needed, announces link directives and regenerates the
bindings module.
"""

import logging

from blisbuild.cli.utils import assemble_config, report_error, rerun_paths
from blisbuild.core.exceptions import BlisBuildError
from blisbuild.pipeline import run_build

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the build command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, 1 for error)
    """
    logger.debug(f"Arguments: {args}")

    try:
        config = assemble_config(args)
        result = run_build(
            config,
            rerun_paths=rerun_paths(args),
            manifest=getattr(args, "manifest", None),
        )
    except BlisBuildError as e:
        return report_error(e)

    if result.built:
        logger.info(f"Built BLIS for {config.target} in {config.out_dir}")
    else:
        logger.info(f"BLIS already installed in {config.out_dir}")
    return 0
