"""
hwtrack - hardware asset tracker client with an in-process mock backend.

See DESIGN.md for architecture and implementation notes.
"""

__version__ = "0.1.0"
