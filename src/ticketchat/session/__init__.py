"""Session module for ticketchat.

Holds the current credential and identity and resolves which actions the
identity may see.
"""

from .base import SessionStore
from .capabilities import Capability, has_capability, is_staff, resolve_capabilities
from .factory import create_session_store
from .models import Session, User

__all__ = [
    "Capability",
    "Session",
    "SessionStore",
    "User",
    "create_session_store",
    "has_capability",
    "is_staff",
    "resolve_capabilities",
]
