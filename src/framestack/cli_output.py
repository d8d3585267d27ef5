"""
Colored CLI output utilities for framestack.

Provides styled terminal output with colors, progress bars, and status indicators.
"""

from __future__ import annotations

import os
import shutil
import sys
from dataclasses import dataclass

from colorama import Fore, Style, init as colorama_init
from tqdm import tqdm

colorama_init(autoreset=True)


class Colors:
    """Color constants for consistent styling."""

    HEADER = Fore.CYAN + Style.BRIGHT
    STAGE = Fore.BLUE + Style.BRIGHT

    SUCCESS = Fore.GREEN + Style.BRIGHT
    WARNING = Fore.YELLOW
    ERROR = Fore.RED + Style.BRIGHT
    INFO = Fore.WHITE

    VALUE = Fore.YELLOW + Style.BRIGHT
    METRIC = Fore.MAGENTA
    PATH = Fore.CYAN

    PROGRESS = Fore.GREEN
    DIM = Style.DIM
    RESET = Style.RESET_ALL


class Symbols:
    """Unicode symbols for status indicators."""

    CHECK = "\u2714"  # ✔
    CROSS = "\u2718"  # ✘
    ARROW = "\u2192"  # →
    BULLET = "\u2022"  # •
    STAR = "\u2605"  # ★

    @classmethod
    def use_ascii(cls):
        """Switch to ASCII-only fallbacks."""
        cls.CHECK = "[OK]"
        cls.CROSS = "[X]"
        cls.ARROW = "->"
        cls.BULLET = "*"
        cls.STAR = "*"


def print_banner(version: str) -> None:
    """Print the framestack startup banner."""
    print(f"{Colors.HEADER}{Symbols.STAR} framestack {version} | frame stacking and tone adjustment{Colors.RESET}")


def print_header(text: str, width: int = 60) -> None:
    """Print a styled section header."""
    line = "═" * width
    print(f"\n{Colors.HEADER}{line}")
    print(f"  {text}")
    print(f"{line}{Colors.RESET}")


def print_stage(text: str) -> None:
    """Print a pipeline stage header."""
    print(f"\n{Colors.STAGE}{Symbols.ARROW} {text}{Colors.RESET}")


def print_success(text: str) -> None:
    """Print a success message."""
    print(f"{Colors.SUCCESS}{Symbols.CHECK} {text}{Colors.RESET}")


def print_warning(text: str) -> None:
    """Print a warning message."""
    print(f"{Colors.WARNING}! {text}{Colors.RESET}")


def print_error(text: str) -> None:
    """Print an error message."""
    print(f"{Colors.ERROR}{Symbols.CROSS} {text}{Colors.RESET}", file=sys.stderr)


def print_metric(name: str, value: str | int | float, unit: str = "") -> None:
    """Print a metric with value."""
    if unit:
        print(f"  {Colors.METRIC}{name}: {Colors.VALUE}{value}{Colors.RESET} {unit}")
    else:
        print(f"  {Colors.METRIC}{name}: {Colors.VALUE}{value}{Colors.RESET}")


def print_path(label: str, path: str) -> None:
    """Print a file path."""
    print(f"  {Colors.INFO}{label}: {Colors.PATH}{path}{Colors.RESET}")


@dataclass
class ProgressConfig:
    """Configuration for progress bars."""

    bar_format: str = "{l_bar}{bar}| {n_fmt}/{total_fmt} [{elapsed}<{remaining}]"
    ncols: int = 80
    colour: str = "green"
    leave: bool = True


def create_progress_bar(
    total: int,
    desc: str,
    unit: str = "row",
    config: ProgressConfig | None = None,
    disable: bool = False,
) -> tqdm:
    """
    Create a styled progress bar.

    Parameters
    ----------
    total : int
        Total number of items.
    desc : str
        Description text.
    unit : str, default "row"
        Unit name for items.
    config : ProgressConfig, optional
        Progress bar configuration.
    disable : bool, default False
        Disable the progress bar.

    Returns
    -------
    tqdm
        Configured progress bar.
    """
    if config is None:
        config = ProgressConfig()

    return tqdm(
        total=total,
        desc=f"{Colors.PROGRESS}{desc}{Colors.RESET}",
        unit=unit,
        bar_format=config.bar_format,
        ncols=config.ncols,
        colour=config.colour,
        leave=config.leave,
        disable=disable,
    )


class RowProgress:
    """
    Adapt the engine's fractional progress callback to a tqdm bar.

    Example
    -------
    >>> with RowProgress(height=1080, desc="Stacking (median)") as progress:
    ...     stack(frames, "median", progress=progress)
    """

    def __init__(self, height: int, desc: str, disable: bool = False):
        self.height = height
        self._bar = create_progress_bar(total=height, desc=desc, disable=disable)
        self._rows = 0

    def __call__(self, fraction: float) -> None:
        rows = round(fraction * self.height)
        if rows > self._rows:
            self._bar.update(rows - self._rows)
            self._rows = rows

    def __enter__(self) -> RowProgress:
        return self

    def __exit__(self, *exc) -> None:
        self._bar.close()


def detect_terminal_capabilities() -> dict:
    """
    Detect terminal capabilities for optimal display.

    Returns
    -------
    dict
        Capabilities dict with 'unicode', 'color', 'width' keys.
    """
    caps = {
        "unicode": True,
        "color": True,
        "width": 80,
    }

    if not sys.stdout.isatty():
        caps["color"] = False
    elif os.environ.get("NO_COLOR"):
        caps["color"] = False
    elif os.environ.get("TERM") == "dumb":
        caps["color"] = False
        caps["unicode"] = False

    caps["width"] = shutil.get_terminal_size().columns

    encoding = (getattr(sys.stdout, "encoding", None) or "").lower()
    if "utf" not in encoding:
        caps["unicode"] = False

    return caps


def setup_terminal() -> dict:
    """
    Setup terminal for optimal display.

    Returns
    -------
    dict
        Terminal capabilities that were configured.
    """
    caps = detect_terminal_capabilities()

    if not caps["unicode"]:
        Symbols.use_ascii()

    return caps
