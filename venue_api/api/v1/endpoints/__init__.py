"""
API endpoints module
"""

from . import venues, health

__all__ = [
    "venues",
    "health",
]
