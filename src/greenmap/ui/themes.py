"""Theme definitions for the TUI.

This module hides the design decisions about:
- Color palettes and visual appearance
- Theme variables (borders, scrollbars, etc.)

To add a new theme, define it here and register in the app.
"""

from textual.theme import Theme

# Forest palette matching the GreenMap web app (forest-green / lime-green)
GREENMAP_FOREST = Theme(
    name="greenmap-forest",
    primary="#84cc16",      # Lime green - main accent
    secondary="#4ade80",    # Light green - bot messages
    accent="#facc15",       # Sun yellow - highlights
    foreground="#e7f5e9",   # Pale mint text
    background="#0b1f14",   # Deep forest
    success="#a3e635",      # Lime - user messages
    warning="#fbbf24",      # Amber - typing indicator
    error="#f87171",        # Red - errors
    surface="#13301f",
    panel="#0f2719",
    dark=True,
    variables={
        "border": "#2f5d3f",
        "border-blurred": "#1f3f2b",
        "scrollbar": "#1f3f2b",
        "scrollbar-hover": "#2f5d3f",
        "scrollbar-active": "#84cc16",
        "footer-key-foreground": "#facc15",
        "text-muted": "#7fa38a",
        "text-disabled": "#3f6b4f",
        "input-selection-background": "#84cc16 30%",
    },
)
