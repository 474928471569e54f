"""
Native build driver.

Stages a fresh copy of the vendored BLIS tree for the target triple,
runs BLIS's configure and install steps in it, and installs into the
output directory. The whole build is skipped when the installed library
is already present; there is no other staleness check.
"""

import logging
from pathlib import Path
from typing import List, Optional

from blisbuild.backends.autotools import AutotoolsBackend
from blisbuild.backends.base import NativeBuildBackend
from blisbuild.core.config import LIBRARY_NAME, BuildConfiguration
from blisbuild.core.exceptions import MissingSourceError, SubprocessFailedError
from blisbuild.core.filesystem import (
    copy_tree,
    ensure_directory,
    is_populated_directory,
    safe_rmtree,
)

logger = logging.getLogger(__name__)


def artifact_name(config: BuildConfiguration) -> str:
    """
    Get the file name of the installed library for a configuration.

    Example:
        >>> artifact_name(BuildConfiguration("x86_64", "x86_64-apple-darwin",
        ...                                  Path("/out")))
        'libblis.dylib'
    """
    if config.is_static:
        return f"lib{LIBRARY_NAME}.a"

    target = config.target.lower()
    if "apple" in target or "darwin" in target:
        return f"lib{LIBRARY_NAME}.dylib"
    if "windows" in target:
        return f"lib{LIBRARY_NAME}.dll"
    return f"lib{LIBRARY_NAME}.so"


def artifact_path(config: BuildConfiguration) -> Path:
    return config.lib_dir / artifact_name(config)


class NativeBuildDriver:
    """
    Build BLIS once per output directory.

    Args:
        backend: Backend running configure and install (default: autotools)
    """

    def __init__(self, backend: Optional[NativeBuildBackend] = None):
        self.backend = backend or AutotoolsBackend()

    def ensure_built(
        self, config: BuildConfiguration, configure_args: List[str]
    ) -> bool:
        """
        Build and install BLIS unless it is already installed.

        Args:
            config: Build configuration
            configure_args: Resolved configure arguments (without prefix)

        Returns:
            True if a build ran, False if the installed library was reused

        Raises:
            MissingSourceError: If the vendored tree is absent or empty
            SubprocessFailedError: If configure or install exits non-zero
            FilesystemError: If the staged tree cannot be prepared
        """
        library = artifact_path(config)
        if library.exists():
            logger.info(f"Using existing {library}")
            return False

        staged = config.staged_dir
        if staged.exists():
            logger.debug(f"Removing stale build tree {staged}")
            safe_rmtree(staged)

        if not is_populated_directory(config.source_dir):
            raise MissingSourceError(config.source_dir)

        logger.info(f"Staging {config.source_dir} into {staged}")
        ensure_directory(config.out_dir)
        copy_tree(config.source_dir, staged)

        args = [f"--prefix={config.out_dir}"] + list(configure_args)
        status = self.backend.configure(args, staged)
        if status != 0:
            raise SubprocessFailedError("configure", status, args)

        env = {"MAKEFLAGS": config.makeflags} if config.makeflags else {}
        status = self.backend.build_install(env, staged)
        if status != 0:
            raise SubprocessFailedError("install", status)

        logger.info(f"Installed {library}")
        return True
