"""
Asset tracker API modules.

Each module contains operations for a specific API domain.
"""

from hwtrack.api import assets, projects

__all__ = ["assets", "projects"]
