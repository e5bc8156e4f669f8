"""
Central version management for steam-catalog.
"""

from __future__ import annotations

__all__ = ["__app_name__", "__version__", "__license__"]

__app_name__ = "steam-catalog"
__version__ = "0.3.0"
__license__ = "MIT"
