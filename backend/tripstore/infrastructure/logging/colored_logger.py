"""Colored transfer logger — ANSI-colored console logging for seeding and bulk transfers.

Provides a TransferLogger with color-coded output per transfer stage,
making it easy to follow bootstrap, import and reset runs in the terminal.

Color scheme:
    🔵 Blue    — Bootstrap / probing
    🟡 Yellow  — Clearing phase
    🟢 Green   — Seeding phase
    🟣 Magenta — Verify (refetch)
    🟠 Cyan    — Snapshot cache
    🔴 Red     — Errors
    ⚪ Gray    — Counters / timing
"""

import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any


class _Colors:
    """ANSI escape codes for terminal colors."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    MAGENTA = "\033[95m"
    CYAN = "\033[96m"
    GRAY = "\033[90m"


Stage = tuple[str, str, str]


class TransferStage:
    """Predefined transfer stages with colors and icons."""

    BOOTSTRAP = ("BOOTSTRAP", _Colors.BLUE, "🚀")
    CLEARING = ("CLEARING", _Colors.YELLOW, "🧹")
    SEEDING = ("SEEDING", _Colors.GREEN, "🌱")
    VERIFY = ("VERIFY", _Colors.MAGENTA, "🔎")
    SNAPSHOT = ("SNAPSHOT", _Colors.CYAN, "💾")
    ERROR = ("ERROR", _Colors.RED, "❌")
    COMPLETE = ("COMPLETE", _Colors.GREEN, "✅")


def _format_kwargs(kwargs: dict[str, Any], color: str) -> str:
    if not kwargs:
        return ""
    details = " | ".join(f"{k}={v}" for k, v in kwargs.items())
    return f" {color}({details}){_Colors.RESET}"


class TransferLogger:
    """Color-coded logger for bootstrap and bulk transfer runs.

    Usage:
        log = TransferLogger("tripstore.application.services.bulk_transfer")
        with log.timed_step(TransferStage.CLEARING, "Removing 12 destinations"):
            ...
        log.counts(removed=12, inserted=6)
    """

    def __init__(self, component_name: str):
        self._logger = logging.getLogger(component_name)

    def step_start(self, stage: Stage, message: str, **kwargs: Any) -> None:
        label, color, icon = stage
        formatted = (
            f"{color}{_Colors.BOLD}{icon} [{label}]{_Colors.RESET} "
            f"{color}{message}{_Colors.RESET}"
        )
        self._logger.info(formatted + _format_kwargs(kwargs, _Colors.GRAY))

    def step_complete(self, stage: Stage, message: str, **kwargs: Any) -> None:
        label, color, icon = stage
        formatted = (
            f"{color}{icon} [{label}]{_Colors.RESET} "
            f"{_Colors.GREEN}✓ {message}{_Colors.RESET}"
        )
        self._logger.info(formatted + _format_kwargs(kwargs, _Colors.GRAY))

    def step_error(self, stage: Stage, message: str, error: Exception | None = None) -> None:
        label, _, _ = stage
        formatted = (
            f"{_Colors.RED}{_Colors.BOLD}❌ [{label}]{_Colors.RESET} "
            f"{_Colors.RED}{message}{_Colors.RESET}"
        )
        if error:
            formatted += f" {_Colors.DIM}→ {type(error).__name__}: {error}{_Colors.RESET}"
        self._logger.error(formatted)

    def detail(self, message: str, **kwargs: Any) -> None:
        formatted = f"   {_Colors.GRAY}├─ {message}{_Colors.RESET}"
        self._logger.debug(formatted + _format_kwargs(kwargs, _Colors.DIM))

    def counts(self, **kwargs: Any) -> None:
        """Log record counters on one line."""
        parts = [f"{k}: {v}" for k, v in kwargs.items()]
        self._logger.info(f"   {_Colors.GRAY}📈 {' | '.join(parts)}{_Colors.RESET}")

    @contextmanager
    def timed_step(self, stage: Stage, message: str, **kwargs: Any) -> Iterator[None]:
        """Log start and end of a step with the elapsed time; failures are re-raised."""
        self.step_start(stage, message, **kwargs)
        start = time.perf_counter()
        try:
            yield
        except Exception as e:
            elapsed = time.perf_counter() - start
            self.step_error(stage, f"{message}: failed after {elapsed:.2f}s", error=e)
            raise
        else:
            elapsed = time.perf_counter() - start
            self.step_complete(stage, f"{message} in {elapsed:.2f}s")
