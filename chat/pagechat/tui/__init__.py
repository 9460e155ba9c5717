"""pagechat TUI package.

Public surface: ``PagechatApp``.
"""
from .app import PagechatApp

__all__ = ["PagechatApp"]
