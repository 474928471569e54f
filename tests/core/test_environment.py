"""
Unit tests for environment lookup.
"""

import pytest

from blisbuild.core.environment import (
    EnvironmentReader,
    feature_key,
    toolchain_key,
)
from blisbuild.core.exceptions import MissingEnvironmentError


class TestKeys:
    """Tests for environment variable naming."""

    def test_feature_key(self):
        assert feature_key("parallel-pthreads") == "BLIS_FEATURE_PARALLEL_PTHREADS"
        assert feature_key("static") == "BLIS_FEATURE_STATIC"
        assert feature_key("runtime-dispatch") == "BLIS_FEATURE_RUNTIME_DISPATCH"

    def test_toolchain_key(self):
        assert toolchain_key("CC") == "TARGET_CC"
        assert toolchain_key("LDFLAGS") == "TARGET_LDFLAGS"


class TestEnvironmentReader:
    """Tests for EnvironmentReader."""

    def test_lookup_set_value(self):
        reader = EnvironmentReader({"BLIS_TARGET": "aarch64-linux-gnu"})
        assert reader.lookup("BLIS_TARGET") == "aarch64-linux-gnu"

    def test_lookup_missing_returns_none(self):
        reader = EnvironmentReader({})
        assert reader.lookup("BLIS_TARGET") is None

    def test_lookup_empty_returns_none(self):
        reader = EnvironmentReader({"BLIS_TARGET": ""})
        assert reader.lookup("BLIS_TARGET") is None

    def test_require_missing_raises(self):
        reader = EnvironmentReader({})
        with pytest.raises(MissingEnvironmentError) as exc_info:
            reader.require("BLIS_OUT_DIR")

        assert exc_info.value.key == "BLIS_OUT_DIR"
        assert exc_info.value.kind == "missing-environment"

    def test_has_feature_presence_enables(self):
        reader = EnvironmentReader({"BLIS_FEATURE_STATIC": "1"})
        assert reader.has_feature("static")
        assert not reader.has_feature("parallel-openmp")

    def test_has_feature_empty_value_enables(self):
        reader = EnvironmentReader({"BLIS_FEATURE_RUNTIME_DISPATCH": ""})
        assert reader.has_feature("runtime-dispatch")

    def test_toolchain_override(self):
        reader = EnvironmentReader({"TARGET_CC": "clang"})
        assert reader.toolchain_override("CC") == "clang"
        assert reader.toolchain_override("FC") is None

    def test_defaults_to_process_environment(self, monkeypatch):
        monkeypatch.setenv("BLIS_CONFNAME", "haswell")
        assert EnvironmentReader().lookup("BLIS_CONFNAME") == "haswell"
