"""
Core functionality for blisbuild.

This package contains the foundational modules that other components depend on.
"""

from .environment import EnvironmentReader, feature_key, toolchain_key

from .config import (
    BuildConfiguration,
    FEATURES,
    PARALLEL_PTHREADS,
    PARALLEL_OPENMP,
    STATIC,
    RUNTIME_DISPATCH,
)

from .exceptions import (
    BlisBuildError,
    ConfigurationError,
    ConfigurationConflictError,
    FilesystemError,
    MissingEnvironmentError,
    BuildError,
    MissingSourceError,
    SubprocessFailedError,
    ToolNotFoundError,
    HeaderParseError,
)

__all__ = [
    "EnvironmentReader",
    "feature_key",
    "toolchain_key",
    "BuildConfiguration",
    "FEATURES",
    "PARALLEL_PTHREADS",
    "PARALLEL_OPENMP",
    "STATIC",
    "RUNTIME_DISPATCH",
    "BlisBuildError",
    "ConfigurationError",
    "ConfigurationConflictError",
    "FilesystemError",
    "MissingEnvironmentError",
    "BuildError",
    "MissingSourceError",
    "SubprocessFailedError",
    "ToolNotFoundError",
    "HeaderParseError",
]
