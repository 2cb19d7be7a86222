"""Backend API module.

Wraps the HTTP endpoints the chat client needs.
"""

from .auth import AuthApi
from .client import ApiClient
from .service import OpenTicketStatus, ServiceApi

__all__ = [
    "ApiClient",
    "AuthApi",
    "OpenTicketStatus",
    "ServiceApi",
]
