"""
Autotools-style build backend (``./configure`` then ``make install``).
"""

import logging
import os
import shlex
import subprocess
from pathlib import Path
from typing import List, Mapping, Sequence

from blisbuild.backends.base import NativeBuildBackend
from blisbuild.core.exceptions import ToolNotFoundError

logger = logging.getLogger(__name__)


class AutotoolsBackend(NativeBuildBackend):
    """
    Runs BLIS's configure script and ``make install`` as subprocesses.

    Args:
        configure_script: Script name inside the staged tree
        make: Make executable
    """

    def __init__(self, configure_script: str = "configure", make: str = "make"):
        self.configure_script = configure_script
        self.make = make

    def configure(self, args: Sequence[str], workdir: Path) -> int:
        cmd = [str(Path(workdir) / self.configure_script)] + list(args)
        return self._run(cmd, workdir)

    def build_install(self, env: Mapping[str, str], workdir: Path) -> int:
        return self._run([self.make, "install"], workdir, env)

    def _run(
        self, cmd: List[str], workdir: Path, extra_env: Mapping[str, str] = None
    ) -> int:
        environ = None
        if extra_env:
            environ = os.environ.copy()
            environ.update(extra_env)

        logger.info(f"Running: `{shlex.join(cmd)}`")
        try:
            result = subprocess.run(cmd, cwd=workdir, env=environ)
        except FileNotFoundError:
            logger.error(f"{cmd[0]} not found")
            raise ToolNotFoundError(cmd[0])
        return result.returncode
