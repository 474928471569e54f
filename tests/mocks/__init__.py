"""
Mock implementations for testing blisbuild components.

This package provides recording fakes for the native toolchain, the C
preprocessor and the header parser so tests never launch real tools.
"""

from .backend import RecordingBackend
from .headers import FakePreprocessor, StubHeaderParser

__all__ = [
    "RecordingBackend",
    "FakePreprocessor",
    "StubHeaderParser",
]
