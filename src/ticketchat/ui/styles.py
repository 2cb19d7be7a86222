"""CSS styles for the TUI.

Hides layout and styling decisions from the application logic.
Uses Textual CSS features: nesting, pseudo-classes, variables.

Layout:
- Home screen with ticket entry and a floating "Open chat" button
- Chat screen with message list, typing hint and composer stacked vertically
- Log panel docked at the bottom of either screen, hidden by default
"""

APP_CSS = """
/* ============================================
   Home Screen
   ============================================ */
#home {
    align: center middle;
    height: 1fr;
    background: $background;
}

#home-card {
    width: 60;
    height: auto;
    padding: 1 2;
    background: $panel;
    border: round $primary 60%;
    border-title-color: $primary;
    border-title-style: bold;
}

#home-greeting {
    width: 100%;
    text-align: center;
    text-style: bold;
    padding-bottom: 1;
}

#ticket-input {
    margin-bottom: 1;
}

/* Floating entry point to an open ticket */
OpenChatButton {
    dock: bottom;
    offset: -2 -1;
    margin: 0 2 1 0;
    width: auto;
    min-width: 14;
}

/* ============================================
   Chat Screen
   ============================================ */
ChatScreen {
    layout: vertical;
    background: $background;
}

#chat-history {
    height: 1fr;
    background: $panel;
    border: round $primary 60%;
    border-title-color: $primary;
    border-title-style: bold;
    border-title-align: left;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
    padding: 0 1;
    scrollbar-gutter: stable;

    &:focus-within {
        border: round $primary-lighten-1;
    }
}

.chat-empty {
    width: 100%;
    padding: 2;
    text-align: center;
    color: $text-muted;
}

/* ============================================
   Chat Messages
   ============================================ */
.chat-message {
    width: 100%;
    height: auto;
    margin: 0 0 1 0;
    padding: 0 2;
    border: none;
    background: transparent;
}

/* Own messages - right side, green accent */
.own-message {
    margin-left: 8;
    border-right: tall $success;
    background: $success 8%;

    & .message-header {
        color: $success;
        text-style: bold;
        text-align: right;
    }

    &:hover {
        background: $success 12%;
    }

    &.-pending {
        opacity: 70%;
        border-right: tall $success 40%;
    }
}

/* Messages of the other party - left side */
.other-message {
    margin-right: 8;
    border-left: tall $secondary;
    background: $secondary 8%;

    & .message-header {
        color: $secondary;
        text-style: bold;
    }

    &:hover {
        background: $secondary 12%;
    }
}

.message-header {
    height: auto;
    padding: 0;
}

.message-content {
    height: auto;
    padding: 0;
    margin: 0;
    color: $foreground;
}

/* ============================================
   Typing Hint
   ============================================ */
TypingIndicatorBar {
    height: 1;
    padding: 0 2;
    color: $text-muted;
    text-style: italic;

    &.-active {
        color: $accent;
    }
}

/* ============================================
   Chat Input Bar - Text Entry + Send
   ============================================ */
ChatInputBar {
    height: 5;
    border: round $primary 60%;
    background: $panel;

    &:focus-within {
        border: round $primary;
    }
}

#chat-input {
    width: 1fr;
    height: 100%;
    border: none;
    padding: 0 1;
    background: transparent;
}

#send-btn {
    width: 10;
    height: 100%;
    margin: 0 0 0 1;
    min-width: 8;
    text-style: bold;
}

/* ============================================
   Debug/Log Panel
   ============================================ */
DebugPanel {
    dock: bottom;
    height: auto;
    min-height: 6;
    max-height: 14;
    background: $panel;
    border: round $warning 60%;
    border-title-color: $warning;
    border-title-style: bold;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
    padding: 0 1;
    scrollbar-gutter: stable;
}

/* ============================================
   Notification Toasts
   ============================================ */
Toast {
    background: $surface;
    border: tall $border;
    padding: 0 1;

    &.-error {
        border: tall $error;
        background: $error 12%;
    }

    &.-warning {
        border: tall $warning;
        background: $warning 12%;
    }
}

* {
    scrollbar-background: $panel;
    scrollbar-color: $surface-lighten-1;
    scrollbar-color-hover: $primary 50%;
    scrollbar-color-active: $primary;
    scrollbar-size: 1 1;
}
"""
