"""Terminal message helpers for the CASEBOOK CLI.

Messages go to stderr so stdout stays machine-readable. Glyphs fall back to
ASCII on streams that cannot encode emoji.
"""

import click

_GLYPHS = {
    "warn": ("⚠️", "[!]"),
    "success": ("✅", "[OK]"),
    "error": ("❌", "[X]"),
}


def _glyph(kind: str) -> str:
    emoji, fallback = _GLYPHS[kind]  # pragma: no mutate
    encoding = getattr(click.get_text_stream("stderr"), "encoding", None) or "ascii"
    try:
        emoji.encode(encoding)
    except UnicodeEncodeError:
        return fallback
    return emoji


def warn(msg: str) -> None:
    """Emit a yellow, bold warning line to stderr."""
    click.secho(f"{_glyph('warn')}  {msg}", fg="yellow", bold=True, err=True)


def success(msg: str) -> None:
    """Emit a green, bold success line to stderr."""
    click.secho(f"{_glyph('success')}  {msg}", fg="green", bold=True, err=True)


def error(msg: str) -> None:
    """Emit a red, bold error line to stderr."""
    click.secho(f"{_glyph('error')}  {msg}", fg="red", bold=True, err=True)
