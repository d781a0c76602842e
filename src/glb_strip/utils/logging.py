"""Colored console logging and timing utilities for glb-strip."""

import sys
import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass


class Colors:
    """ANSI escape codes for terminal colors."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    CYAN = "\033[36m"

    BRIGHT_RED = "\033[91m"
    BRIGHT_GREEN = "\033[92m"
    BRIGHT_CYAN = "\033[96m"


def _supports_color() -> bool:
    """Check if terminal supports color output."""
    if not hasattr(sys.stdout, "isatty"):
        return False
    return sys.stdout.isatty()


_USE_COLOR = _supports_color()


def _c(color: str, text: str) -> str:
    """Apply color to text if supported."""
    if not _USE_COLOR:
        return text
    return f"{color}{text}{Colors.RESET}"


def bold(text: str) -> str:
    return _c(Colors.BOLD, text)


def dim(text: str) -> str:
    return _c(Colors.DIM, text)


def cyan(text: str) -> str:
    return _c(Colors.CYAN, text)


def bright_green(text: str) -> str:
    return _c(Colors.BRIGHT_GREEN, text)


def bright_red(text: str) -> str:
    return _c(Colors.BRIGHT_RED, text)


def bright_cyan(text: str) -> str:
    return _c(Colors.BRIGHT_CYAN, text)


# Log level formatting
def log_info(msg: str) -> None:
    """Print info message."""
    print(f"  {cyan('INFO')}  {msg}")


def log_ok(msg: str) -> None:
    """Print success message."""
    print(f"    {bright_green('OK')}  {msg}")


def log_error(msg: str) -> None:
    """Print error message."""
    print(f" {bright_red('ERROR')}  {msg}")


def log_detail(msg: str, indent: int = 8) -> None:
    """Print indented detail message."""
    print(f"{' ' * indent}{msg}")


def print_header(title: str) -> None:
    """Print a run title underlined to its own width."""
    print()
    print(f"  {bold(title)}")
    print(f"  {cyan('-' * len(title))}")


# Timing utilities
def format_duration(seconds: float) -> str:
    """Per-file timings: milliseconds below one second, seconds above."""
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    return f"{seconds:.2f}s"


@dataclass
class TimingResult:
    """Result from a timed operation."""

    elapsed: float
    message: str


@contextmanager
def timed(description: str) -> Iterator[TimingResult]:
    """Context manager measuring wall time of its block.

    Usage:
        with timed("Cleaning model.glb") as t:
            do_work()
        print(f"Took {t.elapsed}s")
    """
    result = TimingResult(elapsed=0.0, message=description)
    start = time.perf_counter()
    try:
        yield result
    finally:
        result.elapsed = time.perf_counter() - start


# Result formatting
def format_count(count: int, singular: str, plural: str | None = None) -> str:
    """Format count with proper singular/plural form."""
    if plural is None:
        plural = singular + "s"
    word = singular if count == 1 else plural
    return f"{count:,} {word}"


def format_bytes(size: int) -> str:
    """Output file size, in the largest unit that keeps the value below 1024."""
    if size < 1024:
        return f"{size} B"
    value = size / 1024
    for unit in ("KB", "MB"):
        if value < 1024:
            return f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} GB"
