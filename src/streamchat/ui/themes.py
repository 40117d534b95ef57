"""Theme definitions for the TUI.

This module hides the design decisions about:
- Color palettes and visual appearance
- Theme variables (borders, scrollbars, etc.)
- Dark/light mode configuration

To add a new theme, define it here and register in the app.
"""

from textual.theme import Theme

# Neutral dark palette: gray surfaces, emerald for the assistant, sky for the user
NEUTRAL_DARK = Theme(
    name="neutral-dark",
    primary="#38bdf8",      # Sky - user turns, focus
    secondary="#34d399",    # Emerald - assistant turns
    accent="#fbbf24",       # Amber - highlights
    foreground="#e5e5e5",   # Neutral 200
    background="#171717",   # Neutral 900
    success="#4ade80",
    warning="#fb923c",
    error="#f87171",
    surface="#262626",      # Neutral 800 - sidebar, dialogs
    panel="#1f1f1f",
    dark=True,
    variables={
        "block-cursor-foreground": "#171717",
        "block-cursor-background": "#e5e5e5",
        "block-cursor-text-style": "bold",
        "block-hover-background": "#404040 30%",

        "input-cursor-background": "#e5e5e5",
        "input-cursor-foreground": "#171717",
        "input-selection-background": "#38bdf8 30%",

        "border": "#525252",
        "border-blurred": "#404040",

        "scrollbar": "#404040",
        "scrollbar-hover": "#525252",
        "scrollbar-active": "#38bdf8",
        "scrollbar-background": "#1f1f1f",
        "scrollbar-corner-color": "#1f1f1f",

        "footer-foreground": "#d4d4d4",
        "footer-background": "#171717",
        "footer-key-foreground": "#fbbf24",
        "footer-key-background": "#262626",
        "footer-description-foreground": "#a3a3a3",

        "text-muted": "#a3a3a3",
        "text-disabled": "#525252",

        "button-foreground": "#e5e5e5",
        "button-color-foreground": "#171717",
        "button-focus-text-style": "bold reverse",
    },
)
