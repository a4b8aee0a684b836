"""CLI helpers for CASEBOOK.

Utilities used by the command-line interface: database URL resolution and
redaction, OSC-8 terminal hyperlinks when supported, stderr message emitters
with emoji→ASCII fallbacks, and translation of Casebook errors into Click
errors.
"""

from .db_url import resolve_db_url, sanitize_url
from .errors import casebook_errors
from .hyperlinks import hyperlink
from .messages import error, success, warn

__all__ = [
    "casebook_errors",
    "error",
    "hyperlink",
    "resolve_db_url",
    "sanitize_url",
    "success",
    "warn",
]
