"""Colored terminal logger for the IV scanner CLI.

Provides ANSI-coloured output for scan reports.  Falls back to plain text
when the terminal does not support ANSI or when ``IVSCAN_NO_COLOR=1`` is set.

Library modules log through :mod:`logging`; this logger is only used by
front ends that print human-readable results.
"""

from __future__ import annotations

import os
import sys


# ---------------------------------------------------------------------------
# ANSI colour codes
# ---------------------------------------------------------------------------

_RESET = "\033[0m"
_BOLD = "\033[1m"
_DIM = "\033[2m"

_FG_RED = "\033[31m"
_FG_GREEN = "\033[32m"
_FG_YELLOW = "\033[33m"
_FG_BLUE = "\033[34m"
_FG_MAGENTA = "\033[35m"
_FG_CYAN = "\033[36m"
_FG_WHITE = "\033[37m"
_FG_BRIGHT_GREEN = "\033[92m"
_FG_BRIGHT_YELLOW = "\033[93m"


def _supports_color() -> bool:
    """Heuristic check for ANSI colour support."""
    if os.getenv("IVSCAN_NO_COLOR", "").strip().lower() in {"1", "true", "yes"}:
        return False
    if os.getenv("NO_COLOR"):
        return False
    if os.name == "nt":
        if os.getenv("WT_SESSION") or os.getenv("TERM_PROGRAM") == "vscode":
            return True
        return False
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


_COLOR_ENABLED = _supports_color()


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

class ScanLogger:
    """Simple coloured logger with module prefix."""

    # Colour palette per module
    _MODULE_COLORS: dict[str, str] = {
        "Scanner": _FG_CYAN,
        "Vision": _FG_BLUE,
        "Level": _FG_MAGENTA,
        "OCR": _FG_YELLOW,
        "Overlay": _FG_BRIGHT_GREEN,
    }

    def __init__(self, module: str, *, color: bool | None = None) -> None:
        self.module = module
        self._prefix_color = self._MODULE_COLORS.get(module, _FG_WHITE)
        self._color = _COLOR_ENABLED if color is None else color

    def _format(self, level_color: str, level: str, message: str) -> str:
        if self._color:
            return (
                f"{self._prefix_color}{_BOLD}[{self.module}]{_RESET} "
                f"{level_color}{level}{_RESET} {message}"
            )
        return f"[{self.module}] {level} {message}"

    def info(self, message: str) -> None:
        print(self._format(_FG_GREEN, ">", message))

    def success(self, message: str) -> None:
        print(self._format(_FG_BRIGHT_GREEN, "+", message))

    def warn(self, message: str) -> None:
        print(self._format(_FG_YELLOW, "!", message))

    def error(self, message: str) -> None:
        print(self._format(_FG_RED, "X", message), file=sys.stderr)

    def status(self, message: str) -> None:
        """Dimmed status line for non-critical events."""
        if self._color:
            print(f"{self._prefix_color}{_BOLD}[{self.module}]{_RESET} {_DIM}{message}{_RESET}")
        else:
            print(f"[{self.module}] {message}")

    def highlight(self, message: str) -> None:
        """Bold bright message (final results)."""
        if self._color:
            print(f"{self._prefix_color}{_BOLD}[{self.module}] * {message}{_RESET}")
        else:
            print(f"[{self.module}] * {message}")
