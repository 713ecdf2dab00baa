"""
DOM module for nobrowser.

This module provides:
- Document: an immutable parsed HTML page with response metadata
- ElementView: a read-only handle to one element of a Document
"""

from nobrowser.dom.document import Document, sniff_encoding
from nobrowser.dom.element import ElementView, compile_selector

__all__ = [
    "Document",
    "ElementView",
    "compile_selector",
    "sniff_encoding",
]
