"""Display settings for the ticket chat screens and the debug log panel."""


class LogLevel:
    """Numeric levels of the debug log panel.

    Debug callbacks report levels as lowercase strings; the panel compares
    them numerically and hides entries below its threshold.
    """

    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40

    _by_name = {"debug": DEBUG, "info": INFO, "warning": WARNING, "error": ERROR}

    @classmethod
    def name(cls, level: int) -> str:
        for label, value in cls._by_name.items():
            if value == level:
                return label.upper()
        return "UNKNOWN"

    @classmethod
    def from_string(cls, level_str: str) -> int:
        """Map a callback level such as ``"warning"``; unknown names count as debug."""
        return cls._by_name.get(level_str.lower(), cls.DEBUG)


# Composer bar
INPUT_HISTORY_MAX_SIZE = 100  # sent messages recalled with up/down

# Debug log panel
LOG_TIMESTAMP_FORMAT = "%H:%M:%S"
LOG_MAX_MESSAGE_LENGTH = 500  # longer entries are cut with an ellipsis

# Chat history
CHAT_TIME_FORMAT = "%H:%M"
CHAT_EMPTY_TEXT = "No messages yet"
SUPPORT_FALLBACK_NAME = "Support"
