"""
blisbuild - build the vendored BLIS library and generate its Python bindings.
"""

__version__ = "0.1.0"
