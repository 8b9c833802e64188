"""Theme definitions for the TUI.

This module hides the design decisions about:
- Color palettes and visual appearance
- Theme variables (borders, scrollbars, etc.)

To add a new theme, define it here and register in the app.
"""

from textual.theme import Theme

# Dark palette built around AI Studio's blue
STUDIO_DARK = Theme(
    name="studio-dark",
    primary="#8ab4f8",      # Blue - main accent
    secondary="#c58af9",    # Purple - model replies
    accent="#fdd663",       # Yellow - image panel
    foreground="#e8eaed",
    background="#131314",
    success="#81c995",      # Green - user turns
    warning="#fcad70",      # Orange - log panel
    error="#f28b82",        # Red - errors
    surface="#1e1f20",
    panel="#28292a",
    dark=True,
    variables={
        "border": "#444746",
        "border-blurred": "#303134",
        "text-muted": "#9aa0a6",
        "scrollbar": "#303134",
        "scrollbar-hover": "#444746",
        "scrollbar-active": "#8ab4f8",
        "footer-key-foreground": "#fdd663",
        "input-selection-background": "#8ab4f8 30%",
    },
)
