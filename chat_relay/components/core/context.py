"""
Log-safety helpers for user-provided text.

Usernames, message bodies and Origin headers are client-controlled and are
passed through sanitize_log_data() before they reach a log line.
"""

from __future__ import annotations

import re

# C0/C1 controls, zero-width marks, bidi embeddings/overrides/isolates, BOM
_UNSAFE_CHARS = re.compile(
    "["
    r"\x00-\x1f\x7f-\x9f"
    r"\u200b-\u200f"
    r"\u202a-\u202e"
    r"\u2066-\u2069"
    r"\ufeff"
    "]"
)

_ESCAPES = str.maketrans({"\\": "\\\\", '"': '\\"'})


def sanitize_log_data(data: str, max_length: int = 100) -> str:
    """
    Make client text safe to embed in a log line.

    The text is cut to max_length first (marked with "..."), then unsafe
    characters are removed and quotes and backslashes escaped, so a forged
    line break or RTL override never survives into the log.
    """
    suffix = ""
    if len(data) > max_length:
        data, suffix = data[:max_length], "..."
    return _UNSAFE_CHARS.sub("", data).translate(_ESCAPES) + suffix
