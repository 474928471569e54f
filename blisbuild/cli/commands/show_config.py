"""
Show-config command implementation.

Prints the assembled configuration and the configure arguments it
resolves to. Nothing is built or written.
"""

from blisbuild.build.driver import artifact_path
from blisbuild.cli.utils import assemble_config, report_error
from blisbuild.core.exceptions import BlisBuildError
from blisbuild.cross.options import resolve_configure_args


def run(args) -> int:
    """Run the show-config command."""
    try:
        config = assemble_config(args)
        configure_args = resolve_configure_args(config)
    except BlisBuildError as e:
        return report_error(e)

    print(f"Target: {config.target} ({config.target_arch})")
    print(f"Features: {', '.join(sorted(config.features)) or '(none)'}")
    print(f"Source: {config.source_dir}")
    print(f"Output: {config.out_dir}")
    print(f"Artifact: {artifact_path(config)}")
    print(f"Staged tree: {config.staged_dir}")
    for name, value in config.toolchain.items():
        print(f"{name}: {value}")
    print(f"MAKEFLAGS: {config.makeflags or '(inherited)'}")
    print(f"Configure: --prefix={config.out_dir} {' '.join(configure_args)}")
    return 0
