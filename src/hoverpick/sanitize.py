"""Terminal escape sequence removal for captured process output.

Command-line tools emit colors, cursor movement and window-title sequences even
in batch mode. Everything that ends up in an overlay passes through
:func:`strip_ansi` first.
"""

from __future__ import annotations

import re

# ---------------------------------------------------------------------------
# Regex patterns
# ---------------------------------------------------------------------------

# CSI: ESC[ <params 0x30-0x3F>* <intermediates 0x20-0x2F>* <final 0x40-0x7E>
_CSI_RE = re.compile(r"\x1b\[[0-?]*[ -/]*[@-~]")
# OSC: ESC] ... (BEL | ESC\)
_OSC_RE = re.compile(r"\x1b\].*?(?:\x07|\x1b\\)", re.DOTALL)
# Two-character escapes: ESC followed by @-Z, \, ], ^ or _
_SIMPLE_RE = re.compile(r"\x1b[@-Z\\-_]")

# OSC must run before the simple rule, which would otherwise eat its ``ESC]``.
_PASSES = (_CSI_RE, _OSC_RE, _SIMPLE_RE)


def strip_ansi(line: str | None) -> str | None:
    """Remove CSI, OSC and two-character escape sequences from *line*.

    ``None`` and ``""`` are returned unchanged. The passes repeat until the
    text stops changing, so a removal that splices two fragments into a new
    sequence is caught and the result is idempotent.
    """
    if not line:
        return line
    if "\x1b" not in line:
        return line

    previous = None
    text = line
    while text != previous:
        previous = text
        for pattern in _PASSES:
            text = pattern.sub("", text)
    return text
