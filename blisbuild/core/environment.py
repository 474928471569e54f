"""
Environment lookup for blisbuild.

The invoking build system passes everything through environment
variables: enabled features, the target, toolchain overrides and the
output directory. This module is the only place that reads them.

Usage:
    from blisbuild.core.environment import EnvironmentReader

    reader = EnvironmentReader()
    if reader.has_feature("static"):
        ...
    out_dir = reader.require(OUT_DIR)
"""

import logging
import os
from typing import Mapping, Optional

from blisbuild.core.exceptions import MissingEnvironmentError

logger = logging.getLogger(__name__)

FEATURE_PREFIX = "BLIS_FEATURE_"
CONFNAME = "BLIS_CONFNAME"
TARGET_ARCH = "BLIS_TARGET_ARCH"
TARGET = "BLIS_TARGET"
OUT_DIR = "BLIS_OUT_DIR"
MAKEFLAGS = "BLIS_MAKEFLAGS"
SOURCE_DIR = "BLIS_SOURCE_DIR"

# Toolchain override names, in the order they are passed to configure.
TOOLCHAIN_OVERRIDES = ("CC", "FC", "RANLIB", "AR", "CFLAGS", "LDFLAGS")
TOOLCHAIN_PREFIX = "TARGET_"


def feature_key(feature: str) -> str:
    """
    Get the environment variable announcing a feature.

    Example:
        >>> feature_key("parallel-pthreads")
        'BLIS_FEATURE_PARALLEL_PTHREADS'
    """
    return FEATURE_PREFIX + feature.upper().replace("-", "_")


def toolchain_key(name: str) -> str:
    """Get the target-scoped environment variable for a toolchain override."""
    return TOOLCHAIN_PREFIX + name


class EnvironmentReader:
    """
    Read-only view of the build environment.

    Args:
        environ: Mapping to read from (default: ``os.environ``)
    """

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        self._environ = os.environ if environ is None else environ

    def lookup(self, key: str) -> Optional[str]:
        """
        Look up an environment value.

        Returns:
            The value when the variable is set and non-empty, None otherwise
        """
        value = self._environ.get(key)
        if not value:
            return None
        return value

    def require(self, key: str) -> str:
        """
        Look up a value the build cannot proceed without.

        Raises:
            MissingEnvironmentError: If the variable is unset or empty
        """
        value = self.lookup(key)
        if value is None:
            raise MissingEnvironmentError(key)
        return value

    def has_feature(self, feature: str) -> bool:
        """Check whether the invoking build system enabled a feature (set = on)."""
        enabled = feature_key(feature) in self._environ
        logger.debug(f"Feature {feature}: {'enabled' if enabled else 'disabled'}")
        return enabled

    def toolchain_override(self, name: str) -> Optional[str]:
        """Look up the target-scoped value of a toolchain override."""
        return self.lookup(toolchain_key(name))
