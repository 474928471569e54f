"""
Recording native build backend.

Records every configure/install call instead of running a toolchain and,
on a successful install, writes the files a real ``make install`` would.
"""

from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from blisbuild.backends.base import NativeBuildBackend


class RecordingBackend(NativeBuildBackend):
    """Backend double recording calls and simulating an install."""

    def __init__(
        self,
        configure_status: int = 0,
        install_status: int = 0,
        installs: Optional[Dict[Path, str]] = None,
    ):
        self.configure_status = configure_status
        self.install_status = install_status
        self.installs = installs or {}
        self.calls: List[Tuple[str, object, Path]] = []

    def configure(self, args: Sequence[str], workdir: Path) -> int:
        self.calls.append(("configure", list(args), Path(workdir)))
        return self.configure_status

    def build_install(self, env: Mapping[str, str], workdir: Path) -> int:
        self.calls.append(("build_install", dict(env), Path(workdir)))
        if self.install_status == 0:
            for path, content in self.installs.items():
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_text(content)
        return self.install_status

    @property
    def steps(self) -> List[str]:
        return [call[0] for call in self.calls]
