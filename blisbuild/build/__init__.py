"""
Native build of the vendored BLIS tree.
"""

from blisbuild.build.driver import NativeBuildDriver, artifact_name, artifact_path

__all__ = ["NativeBuildDriver", "artifact_name", "artifact_path"]
