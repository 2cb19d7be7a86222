"""Client configuration constants.

Centralizes the defaults of the HTTP client, the real-time transport and
the chat view. The CLI overrides the connection values from environment
variables (see ``cli/providers.py``).
"""

from pathlib import Path

# Backend location (development default of the shop backend)
DEFAULT_SERVER_URL = "http://192.168.178.24:5000"
API_PREFIX = "/api"

# HTTP client
REQUEST_TIMEOUT_SECONDS = 30.0

# Real-time transport
TRANSPORT_SOCKETIO = "socketio"
TRANSPORT_MEMORY = "memory"
RECONNECTION_ATTEMPTS = 5
RECONNECTION_DELAY_SECONDS = 1.0
OUTBOX_MAX_SIZE = 50  # Unacknowledged sends kept while disconnected

# Socket event names
EVENT_MESSAGE = "message"
EVENT_JOIN = "joinChat"
EVENT_LEAVE = "leaveChat"
EVENT_TYPING = "typing"
EVENT_STOP_TYPING = "stopTyping"

# Chat view behaviour
TYPING_INDICATOR_TIMEOUT_SECONDS = 3.0
TYPING_EMIT_INTERVAL_SECONDS = 2.0
OPTIMISTIC_ID_PREFIX = "temp_"

# Session storage
SESSION_BACKEND_MEMORY = "memory"
SESSION_BACKEND_FILE = "file"
DEFAULT_SESSION_PATH = Path.home() / ".ticketchat" / "session.json"
