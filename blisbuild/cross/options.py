"""
Configure argument resolution.

Turns a BuildConfiguration into the ordered argument list for BLIS's
own ``configure`` script: threading backend, linkage mode, toolchain
overrides and finally the configuration name.
"""

import logging
from typing import List, Tuple

from blisbuild.core.config import (
    PARALLEL_OPENMP,
    PARALLEL_PTHREADS,
    RUNTIME_DISPATCH,
    BuildConfiguration,
)
from blisbuild.core.environment import TOOLCHAIN_OVERRIDES
from blisbuild.core.exceptions import ConfigurationConflictError
from blisbuild.cross.targets import select_confname

logger = logging.getLogger(__name__)

STATIC_LINKAGE = ("--enable-static", "--disable-shared")
DYNAMIC_LINKAGE = ("--disable-static", "--enable-shared")


def resolve_threading(config: BuildConfiguration) -> str:
    """
    Resolve the threading backend.

    Returns:
        'pthreads', 'openmp' or 'no'

    Raises:
        ConfigurationConflictError: If both threading features are enabled
    """
    pthreads = config.has_feature(PARALLEL_PTHREADS)
    openmp = config.has_feature(PARALLEL_OPENMP)

    if pthreads and openmp:
        raise ConfigurationConflictError(PARALLEL_PTHREADS, PARALLEL_OPENMP)
    if pthreads:
        return "pthreads"
    if openmp:
        return "openmp"
    return "no"


def resolve_linkage(config: BuildConfiguration) -> Tuple[str, str]:
    """Static-only or dynamic-only; BLIS is never built both ways."""
    return STATIC_LINKAGE if config.is_static else DYNAMIC_LINKAGE


def toolchain_args(config: BuildConfiguration) -> List[str]:
    """Build ``NAME=value`` arguments for the overrides that are set."""
    return [
        f"{name}={config.toolchain[name]}"
        for name in TOOLCHAIN_OVERRIDES
        if name in config.toolchain
    ]


def resolve_configure_args(config: BuildConfiguration) -> List[str]:
    """
    Resolve the full configure argument list.

    The install prefix is not included; the build driver adds it.

    Args:
        config: Build configuration

    Returns:
        Ordered configure arguments, ending with the configuration name

    Raises:
        ConfigurationConflictError: If both threading features are enabled

    Example:
        >>> config = BuildConfiguration("aarch64", "aarch64-linux-gnu",
        ...                             Path("/out"), features={"static"})
        >>> resolve_configure_args(config)
        ['--enable-threading=no', '--enable-static', '--disable-shared', 'auto']
    """
    args = [f"--enable-threading={resolve_threading(config)}"]
    args.extend(resolve_linkage(config))
    args.extend(toolchain_args(config))

    confname = select_confname(
        config.target_arch,
        runtime_dispatch=config.has_feature(RUNTIME_DISPATCH),
        override=config.confname,
    )
    args.append(confname)

    logger.debug(f"Configure arguments: {args}")
    return args
