"""Persistence for users, pastes and share grants.

This module provides:
- UserStore: the credential store
- PasteStore: the paste store with its share grants
"""

from .pastes import Paste, PasteStore, SharedPaste, ShareGrant
from .users import User, UserStore

__all__ = ["Paste", "PasteStore", "SharedPaste", "ShareGrant", "User", "UserStore"]
