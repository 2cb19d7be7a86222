"""Theme definitions for the TUI.

This module hides the design decisions about:
- Color palettes and visual appearance
- Theme variables (borders, scrollbars, etc.)

To add a new theme, define it here and register in the app.
"""

from textual.theme import Theme

# Workshop green, matching the shop's mobile app
WORKSHOP_GREEN = Theme(
    name="workshop-green",
    primary="#4CAF50",      # Brand green - own messages, send button
    secondary="#81C784",    # Light green - other party
    accent="#FFD54F",       # Amber - highlights
    foreground="#E8F5E9",   # Pale green text
    background="#0F1A10",   # Deep background
    success="#66BB6A",
    warning="#FFB74D",
    error="#E57373",
    surface="#1E1E1E",
    panel="#15241A",
    dark=True,
    variables={
        "block-cursor-foreground": "#0F1A10",
        "block-cursor-background": "#A5D6A7",
        "block-cursor-text-style": "bold",
        "input-cursor-background": "#E8F5E9",
        "input-cursor-foreground": "#0F1A10",
        "input-selection-background": "#4CAF50 30%",
        "border": "#2E4A34",
        "border-blurred": "#233A28",
        "scrollbar": "#233A28",
        "scrollbar-hover": "#2E4A34",
        "scrollbar-active": "#4CAF50",
        "scrollbar-background": "#15241A",
        "footer-foreground": "#C8E6C9",
        "footer-background": "#0F1A10",
        "footer-key-foreground": "#FFD54F",
        "footer-key-background": "#233A28",
        "text-muted": "#7A9A80",
        "text-disabled": "#3B5A41",
        "button-foreground": "#E8F5E9",
        "button-color-foreground": "#0F1A10",
        "button-focus-text-style": "bold reverse",
    },
)
