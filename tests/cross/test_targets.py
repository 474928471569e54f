"""
Tests for BLIS configuration name selection.
"""

import pytest

from blisbuild.cross.targets import AUTO, GENERIC, X86_64_DISPATCH, select_confname


class TestSelectConfname:
    """Test the architecture to configuration name mapping."""

    @pytest.mark.parametrize(
        "target_arch,runtime_dispatch,expected",
        [
            ("x86_64", True, X86_64_DISPATCH),
            ("x86_64", False, AUTO),
            ("aarch64", True, AUTO),
            ("aarch64", False, AUTO),
            ("arm", False, AUTO),
            ("armv7", True, AUTO),
            ("powerpc64", False, AUTO),
            ("riscv64", False, GENERIC),
            ("riscv64", True, GENERIC),
            ("wasm32", False, GENERIC),
        ],
    )
    def test_mapping(self, target_arch, runtime_dispatch, expected):
        assert select_confname(target_arch, runtime_dispatch) == expected

    def test_override_wins(self):
        """Test an explicit name is used verbatim for any architecture."""
        assert select_confname("x86_64", True, override="haswell") == "haswell"
        assert select_confname("riscv64", override="rv64iv") == "rv64iv"

    def test_empty_override_is_ignored(self):
        assert select_confname("x86_64", True, override="") == "x86_64"

    def test_tokens(self):
        assert X86_64_DISPATCH == "x86_64"
        assert AUTO == "auto"
        assert GENERIC == "generic"
