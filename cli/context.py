"""
Shared CLI context utilities.
"""

from __future__ import annotations

import json
import sys
from dataclasses import dataclass
from typing import Any, Mapping

_COLORS = {
    "warn": "\033[33m",
    "error": "\033[31m",
}
_RESET = "\033[0m"


@dataclass
class CliContext:
    json_mode: bool = False
    quiet: bool = False
    verbose: bool = False
    color: bool = True

    def log(self, level: str, message: str) -> None:
        if self.quiet and level.lower() == "info":
            return
        formatted = f"[{level}] {message}" if self.verbose else message
        prefix = _COLORS.get(level.lower()) if self.color and sys.stderr.isatty() else None
        if prefix:
            formatted = f"{prefix}{formatted}{_RESET}"
        print(formatted, file=sys.stderr)

    def info(self, message: str) -> None:
        self.log("info", message)

    def warn(self, message: str) -> None:
        self.log("warn", message)

    def error(self, message: str) -> None:
        self.log("error", message)

    def emit(self, payload: Mapping[str, Any]) -> None:
        json.dump(payload, sys.stdout, indent=2, default=str)
        sys.stdout.write("\n")
