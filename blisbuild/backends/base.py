"""
Native build backend interface for blisbuild.

This module defines the abstract base class for the tools that actually
configure and install the vendored library.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Mapping, Sequence


class NativeBuildBackend(ABC):
    """
    Abstract base class for native build backends.

    A backend runs the library's own configure and install steps inside a
    staged build tree and reports their exit status.
    """

    @abstractmethod
    def configure(self, args: Sequence[str], workdir: Path) -> int:
        """
        Run the configure step.

        Args:
            args: Arguments for the configure script
            workdir: Staged build tree

        Returns:
            Exit status of the configure step
        """
        pass

    @abstractmethod
    def build_install(self, env: Mapping[str, str], workdir: Path) -> int:
        """
        Build all targets and install them.

        Args:
            env: Extra environment for the step (e.g., MAKEFLAGS)
            workdir: Staged build tree

        Returns:
            Exit status of the build/install step
        """
        pass
