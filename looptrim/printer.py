# looptrim/printer.py
# Centralized terminal output for the loop trimmer CLI.

import os
import sys
from typing import Optional


class OutputPrinter:
    """
    Terminal formatter for batch runs.

    - Results are the focal point; progress stays secondary (tqdm).
    - Errors always go to stderr and are never silenced by --quiet.
    - Color is optional and honors the NO_COLOR environment variable.
    """

    SYMBOLS : dict[str, str] = {
        "success" : "✅",
        "error"   : "❌",
        "warning" : "⚠️ ",
        "info"    : "ℹ️ ",
        "hint"    : "→",
    }

    COLORS : dict[str, str] = {
        "green"  : "32",
        "red"    : "31",
        "yellow" : "33",
        "cyan"   : "36",
        "dim"    : "90",
    }

    COL_WIDTH : int = 10  # key column width in detail blocks

    def __init__(self, quiet : bool = False, no_color : bool = False) -> None:
        self.quiet    : bool = quiet
        self.no_color : bool = no_color or bool(os.environ.get("NO_COLOR", ""))

    # ── Internal ─────────────────────────────────────────────────

    def _colorize(self, text : str, code : str) -> str:
        if self.no_color:
            return text
        return f"\033[{code}m{text}\033[0m"

    def _details(self, details : dict[str, str], stream=None) -> None:
        for key, value in details.items():
            dim_key : str = self._colorize(f"{key:<{self.COL_WIDTH}}", self.COLORS["dim"])
            print(f"    {dim_key}: {value}", file=stream or sys.stdout)

    # ── Per-file lines ───────────────────────────────────────────

    def file_done(self, filename : str, output_path : str) -> None:
        if self.quiet:
            return
        symbol : str = self._colorize(self.SYMBOLS["success"], self.COLORS["green"])
        print(f"{symbol}  {filename} {self.SYMBOLS['hint']} {output_path}")

    def file_failed(self, filename : str, reason : str) -> None:
        """Failures are errors: always printed, always stderr."""
        symbol : str = self._colorize(self.SYMBOLS["error"], self.COLORS["red"])
        name   : str = self._colorize(filename, self.COLORS["red"])
        first, _, rest = reason.partition("\n")
        print(f"{symbol}  {name}: {first}", file=sys.stderr)
        if rest:
            print(rest, file=sys.stderr)

    # ── Level-1 outputs ──────────────────────────────────────────

    def success(self, title : str, details : Optional[dict[str, str]] = None) -> None:
        if self.quiet:
            return
        symbol : str = self._colorize(self.SYMBOLS["success"], self.COLORS["green"])
        label  : str = self._colorize(title, self.COLORS["green"])
        print(f"\n{symbol}  {label}")
        if details:
            self._details(details)

    def error(self, message : str, hint : Optional[str] = None) -> None:
        symbol : str = self._colorize(self.SYMBOLS["error"], self.COLORS["red"])
        msg    : str = self._colorize(message, self.COLORS["red"])
        print(f"\n{symbol}  {msg}", file=sys.stderr)
        if hint:
            h : str = self._colorize(f"{self.SYMBOLS['hint']} {hint}", self.COLORS["cyan"])
            print(f"    {h}", file=sys.stderr)

    def warning(self, message : str, hint : Optional[str] = None) -> None:
        if self.quiet:
            return
        symbol : str = self._colorize(self.SYMBOLS["warning"], self.COLORS["yellow"])
        msg    : str = self._colorize(message, self.COLORS["yellow"])
        print(f"\n{symbol} {msg}")
        if hint:
            h : str = self._colorize(f"{self.SYMBOLS['hint']} {hint}", self.COLORS["cyan"])
            print(f"    {h}")

    def info(self, message : str) -> None:
        if self.quiet:
            return
        symbol : str = self._colorize(self.SYMBOLS["info"], self.COLORS["cyan"])
        print(f"{symbol} {message}")

    def summary(self, total : int, succeeded : int, failed : int, elapsed : float) -> None:
        """Closing block: green when every file succeeded, yellow otherwise."""
        if self.quiet:
            return
        details : dict[str, str] = {
            "Files"     : str(total),
            "Succeeded" : str(succeeded),
            "Failed"    : str(failed),
            "Time"      : f"{elapsed:.1f}s",
        }
        if failed == 0:
            self.success("All loops exported", details)
        else:
            self.warning(f"{failed} of {total} file(s) failed")
            self._details(details)
