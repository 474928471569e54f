"""
Pytest configuration and shared fixtures for blisbuild tests.
"""

import shutil

import pytest
from pathlib import Path

from blisbuild.core.config import BuildConfiguration
from tests.mocks import RecordingBackend


def pytest_collection_modifyitems(config, items):
    """Skip integration tests when no C preprocessor is available."""
    if shutil.which("cc"):
        return

    skip_integration = pytest.mark.skip(reason="needs a C compiler on PATH")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


@pytest.fixture
def upstream(tmp_path) -> Path:
    """
    Create a minimal vendored BLIS source tree.

    Returns:
        Path to the tree (contains a configure script and one source file)
    """
    source = tmp_path / "upstream"
    (source / "frame" / "base").mkdir(parents=True)
    (source / "configure").write_text("#!/bin/sh\nexit 0\n")
    (source / "frame" / "base" / "bli_init.c").write_text("void bli_init(void) {}\n")
    return source


@pytest.fixture
def make_config(tmp_path, upstream):
    """
    Factory for BuildConfiguration with test defaults.

    Example:
        def test_static(make_config):
            config = make_config(features={"static"})
    """

    def _make(**overrides) -> BuildConfiguration:
        values = {
            "target_arch": "x86_64",
            "target": "x86_64-unknown-linux-gnu",
            "out_dir": tmp_path / "out",
            "source_dir": upstream,
        }
        values.update(overrides)
        return BuildConfiguration(**values)

    return _make


@pytest.fixture
def installing_backend():
    """
    Factory for a RecordingBackend that installs the library for a config.

    The simulated install writes the artifact and the public header.
    """

    def _make(config: BuildConfiguration, **kwargs) -> RecordingBackend:
        from blisbuild.build.driver import artifact_path

        installs = {
            artifact_path(config): "",
            config.header_path: "void bli_init(void);\n",
        }
        return RecordingBackend(installs=installs, **kwargs)

    return _make


@pytest.fixture
def clean_environ(monkeypatch):
    """Remove every variable blisbuild reads from the process environment."""
    import os

    for key in list(os.environ):
        if key.startswith("BLIS_") or key.startswith("TARGET_"):
            monkeypatch.delenv(key, raising=False)
    return monkeypatch
