"""Console output formatting utilities for WireFlow."""

from __future__ import annotations

import sys
from typing import Any, Dict, Iterable, List, Optional

from wireflow.core.errors import ErrorPayload


def _fmt_value(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(str(v) for v in value) + "]"
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None or value == "":
        return '""'
    return str(value)


class Console:
    """Centralized console output formatting."""

    def __init__(self, debug: bool = False):
        """
        Initialize console formatter.

        Args:
            debug: If True, show detailed output including stack traces
        """
        self.debug = debug

    def print_header(self, title: str) -> None:
        """Print a section header."""
        print(f"\n{title}")
        print("-" * len(title))

    def print_info(self, message: str) -> None:
        """Print informational message."""
        print(message)

    def print_warning(self, message: str) -> None:
        print(f"Warning: {message}", file=sys.stderr)

    def print_event(self, event: Dict[str, Any]) -> None:
        """Print a run event (progress line or warning)."""
        level = event.get("level")
        if level == "warning":
            self.print_warning(event.get("message", ""))
        elif level == "error":
            return
        elif level == "debug":
            self.print_debug(event.get("message", ""))
        else:
            print(event.get("message", ""))

    def print_statuses(self, rows: Iterable[tuple]) -> None:
        """Print `name [status]` lines."""
        rows = list(rows)
        if not rows:
            print("(no workflows)")
            return
        width = max(len(name) for name, _ in rows)
        for name, label in rows:
            print(f"  {name.ljust(width)}  [{label}]")

    def print_config(self, rows: List[Dict[str, Any]], effective_model: Optional[str] = None) -> None:
        """Print `key = value  (source)` lines."""
        width = max((len(r["key"]) for r in rows), default=0)
        for r in rows:
            print(f"  {r['key'].ljust(width)} = {_fmt_value(r['value'])}  ({r['source']})")
        if effective_model is not None:
            print(f"\n  effective model: {effective_model}")

    def print_results(self, executed: List[str], skipped: List[str], dry_run: Optional[List[str]] = None) -> None:
        """Print final results summary."""
        print("\n" + "=" * 40)
        print("RESULTS")
        print("=" * 40)
        print(f"  executed: {', '.join(executed) if executed else '-'}")
        print(f"  fresh:    {', '.join(skipped) if skipped else '-'}")
        if dry_run:
            print(f"  dry run:  {', '.join(dry_run)}")

    def print_error(
        self,
        title: str,
        message: str,
        details: Optional[list] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        """
        Print structured error message.

        Args:
            title: Error title
            message: Main error message
            details: Optional list of detail lines
            suggestion: Optional suggestion for user
        """
        print(f"\nERROR: {title}", file=sys.stderr)
        print(f"{message}", file=sys.stderr)
        if details:
            for detail in details:
                print(f"  {detail}", file=sys.stderr)
        if suggestion:
            print(f"\n{suggestion}", file=sys.stderr)

    def print_payload(self, payload: ErrorPayload) -> None:
        """Print an ErrorPayload; details only in debug mode."""
        details = None
        if self.debug:
            details = [f"{k}: {v}" for k, v in sorted(payload.details.items())]
        self.print_error(payload.type, payload.message, details=details, suggestion=payload.hint)

    def print_debug(self, message: str) -> None:
        """Print debug message (only if debug mode enabled)."""
        if self.debug:
            print(f"[DEBUG] {message}", file=sys.stderr)


# Global console instance (will be initialized by CLI)
_console: Optional[Console] = None


def get_console() -> Console:
    """Get the global console instance."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def set_console(console: Console) -> None:
    """Set the global console instance."""
    global _console
    _console = console
