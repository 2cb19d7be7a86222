"""Textual TUI for ticket chats."""

from .app import TicketChatApp, run_textual_tui
from .screens import ChatScreen, ConfirmationScreen

__all__ = ["ChatScreen", "ConfirmationScreen", "TicketChatApp", "run_textual_tui"]
