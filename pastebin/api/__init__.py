"""HTTP endpoints of the pastebin.

This module provides:
- AuthAPI, PasteAPI: endpoint classes
- register_endpoints, register_error_handlers: binders used by the app factory
"""

from .auth import AuthAPI
from .endpoints import register_endpoints, register_error_handlers
from .pastes import PasteAPI

__all__ = ["AuthAPI", "PasteAPI", "register_endpoints", "register_error_handlers"]
