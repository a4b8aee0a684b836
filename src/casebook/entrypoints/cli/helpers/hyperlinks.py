"""OSC-8 hyperlinks for the CASEBOOK CLI, with a plain-text fallback."""

import os
import sys
from typing import TextIO

_OSC8_TERMINALS = {"apple_terminal", "vscode", "iterm.app", "wezterm", "kitty"}


def supports_osc8(stream: TextIO | None = None) -> bool:
    """Guess whether `stream` (default ``sys.stdout``) renders OSC-8 links.

    Non-TTY streams never do. Otherwise a short allowlist of terminal
    identifiers decides; pagers may still strip the escapes.
    """
    stream = stream or sys.stdout
    if not getattr(stream, "isatty", lambda: False)():
        return False
    return bool(
        (os.getenv("TERM_PROGRAM") or "").lower() in _OSC8_TERMINALS
        or os.getenv("WT_SESSION")  # Windows Terminal
        or os.getenv("VTE_VERSION")  # GNOME Terminal, Tilix, etc.
        or os.getenv("TERM", "").startswith(("alacritty", "konsole"))
    )


def hyperlink(url: str, label: str | None = None) -> str:
    """Return `label` (default `url`) linked to `url` when the terminal allows."""
    label = label or url
    if not supports_osc8():
        return label
    return f"\x1b]8;;{url}\x07{label}\x1b]8;;\x07"  # OSC 8 ; ; URL BEL
