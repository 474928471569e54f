"""
Platform configuration for blisbuild.

This package maps the target architecture and the enabled features to
the arguments of BLIS's own configure step.
"""

from blisbuild.cross.targets import AUTO, GENERIC, X86_64_DISPATCH, select_confname
from blisbuild.cross.options import (
    resolve_configure_args,
    resolve_linkage,
    resolve_threading,
    toolchain_args,
)

__all__ = [
    "AUTO",
    "GENERIC",
    "X86_64_DISPATCH",
    "select_confname",
    "resolve_configure_args",
    "resolve_linkage",
    "resolve_threading",
    "toolchain_args",
]
