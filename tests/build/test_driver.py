"""
Tests for the native build driver.
"""

import pytest

from blisbuild.build.driver import NativeBuildDriver, artifact_name, artifact_path
from blisbuild.core.exceptions import (
    FilesystemError,
    MissingSourceError,
    SubprocessFailedError,
)
from tests.mocks import RecordingBackend

ARGS = ["--enable-threading=no", "--disable-static", "--enable-shared", "auto"]


class TestArtifactName:
    """Tests for the installed library file name."""

    @pytest.mark.parametrize(
        "target,features,expected",
        [
            ("x86_64-unknown-linux-gnu", set(), "libblis.so"),
            ("x86_64-unknown-linux-gnu", {"static"}, "libblis.a"),
            ("aarch64-apple-darwin", set(), "libblis.dylib"),
            ("aarch64-apple-darwin", {"static"}, "libblis.a"),
            ("x86_64-pc-windows-gnu", set(), "libblis.dll"),
        ],
    )
    def test_name(self, make_config, target, features, expected):
        config = make_config(target=target, features=features)
        assert artifact_name(config) == expected

    def test_path_is_in_lib_dir(self, make_config):
        config = make_config(features={"static"})
        assert artifact_path(config) == config.out_dir / "lib" / "libblis.a"


class TestEnsureBuilt:
    """Tests for NativeBuildDriver.ensure_built."""

    def test_builds_when_missing(self, make_config, installing_backend):
        """Test a full build stages, configures and installs."""
        config = make_config()
        backend = installing_backend(config)

        built = NativeBuildDriver(backend).ensure_built(config, ARGS)

        assert built is True
        assert backend.steps == ["configure", "build_install"]
        _, args, workdir = backend.calls[0]
        assert args == [f"--prefix={config.out_dir}"] + ARGS
        assert workdir == config.staged_dir
        assert (config.staged_dir / "configure").exists()
        assert (config.staged_dir / "frame" / "base" / "bli_init.c").exists()
        assert artifact_path(config).exists()

    def test_skips_when_installed(self, make_config):
        """Test an installed library means no subprocess and no staging."""
        config = make_config()
        library = artifact_path(config)
        library.parent.mkdir(parents=True)
        library.write_text("")
        config.staged_dir.mkdir(parents=True)
        marker = config.staged_dir / "marker"
        marker.write_text("kept")
        backend = RecordingBackend()

        built = NativeBuildDriver(backend).ensure_built(config, ARGS)

        assert built is False
        assert backend.calls == []
        assert marker.read_text() == "kept"

    def test_second_run_is_noop(self, make_config, installing_backend):
        config = make_config()
        backend = installing_backend(config)
        driver = NativeBuildDriver(backend)

        assert driver.ensure_built(config, ARGS) is True
        assert driver.ensure_built(config, ARGS) is False
        assert backend.steps == ["configure", "build_install"]

    def test_removes_stale_staged_tree(self, make_config, installing_backend):
        config = make_config()
        config.staged_dir.mkdir(parents=True)
        stale = config.staged_dir / "stale.o"
        stale.write_text("")

        NativeBuildDriver(installing_backend(config)).ensure_built(config, ARGS)

        assert not stale.exists()
        assert (config.staged_dir / "configure").exists()

    def test_static_build_checks_static_archive(self, make_config, installing_backend):
        config = make_config(features={"static"})
        backend = installing_backend(config)

        NativeBuildDriver(backend).ensure_built(config, ARGS)

        assert (config.lib_dir / "libblis.a").exists()

    def test_missing_source(self, make_config, tmp_path):
        config = make_config(source_dir=tmp_path / "absent")
        backend = RecordingBackend()

        with pytest.raises(MissingSourceError) as exc_info:
            NativeBuildDriver(backend).ensure_built(config, ARGS)

        assert exc_info.value.kind == "missing-prerequisite"
        assert "git submodule update --init" in str(exc_info.value)
        assert backend.calls == []

    def test_empty_source(self, make_config, tmp_path):
        """Test an uninitialised submodule directory is reported as missing."""
        empty = tmp_path / "empty"
        empty.mkdir()
        config = make_config(source_dir=empty)

        with pytest.raises(MissingSourceError):
            NativeBuildDriver(RecordingBackend()).ensure_built(config, ARGS)

        assert not config.staged_dir.exists()

    def test_configure_failure(self, make_config):
        config = make_config()
        backend = RecordingBackend(configure_status=1)

        with pytest.raises(SubprocessFailedError) as exc_info:
            NativeBuildDriver(backend).ensure_built(config, ARGS)

        assert exc_info.value.step == "configure"
        assert exc_info.value.returncode == 1
        assert exc_info.value.command[-1] == "auto"
        assert backend.steps == ["configure"]

    def test_install_failure(self, make_config):
        config = make_config()
        backend = RecordingBackend(install_status=2)

        with pytest.raises(SubprocessFailedError) as exc_info:
            NativeBuildDriver(backend).ensure_built(config, ARGS)

        assert exc_info.value.step == "install"
        assert exc_info.value.returncode == 2
        assert not artifact_path(config).exists()

    def test_unwritable_out_dir(self, make_config, tmp_path):
        """Test an OS error while staging is reported as FilesystemError."""
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        config = make_config(out_dir=blocker / "out")
        backend = RecordingBackend()

        with pytest.raises(FilesystemError) as exc_info:
            NativeBuildDriver(backend).ensure_built(config, ARGS)

        assert exc_info.value.kind == "filesystem"
        assert backend.calls == []

    def test_makeflags_passed_to_install(self, make_config, installing_backend):
        config = make_config(makeflags="-j8")
        backend = installing_backend(config)

        NativeBuildDriver(backend).ensure_built(config, ARGS)

        assert backend.calls[1][1] == {"MAKEFLAGS": "-j8"}

    def test_no_makeflags_inherits(self, make_config, installing_backend):
        config = make_config()
        backend = installing_backend(config)

        NativeBuildDriver(backend).ensure_built(config, ARGS)

        assert backend.calls[1][1] == {}
