"""
Native build backends for blisbuild.
"""

from blisbuild.backends.base import NativeBuildBackend
from blisbuild.backends.autotools import AutotoolsBackend

__all__ = ["NativeBuildBackend", "AutotoolsBackend"]
