"""
Rich logging utilities for the read-along sync engine.
"""

from typing import Optional, Sequence

from rich.console import Console
from rich.text import Text
from rich.theme import Theme

from audiosync.utils.config import config

# Custom theme for read-along output
custom_theme = Theme(
    {
        "info": "cyan",
        "success": "green",
        "warning": "yellow",
        "error": "red bold",
        "step": "blue bold",
        "debug": "dim",
        "sentence": "white",
        "word": "black on yellow",
        "muted": "grey50",
    }
)

# Global console instance
console = Console(theme=custom_theme)

_verbose: Optional[bool] = None


def set_verbose(enabled: bool) -> None:
    """Override the configured verbosity."""
    global _verbose
    _verbose = enabled


def is_verbose() -> bool:
    return config.verbose if _verbose is None else _verbose


def info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]ℹ[/info] {message}")


def success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]✓[/success] {message}")


def warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[warning]⚠[/warning] {message}")


def error(message: str) -> None:
    """Print an error message."""
    console.print(f"[error]✗[/error] {message}")


def debug(message: str) -> None:
    """Print a debug message when verbose logging is on."""
    if is_verbose():
        console.print(f"[debug]· {message}[/debug]")


def step(message: str, step_num: Optional[int] = None, total: Optional[int] = None) -> None:
    """Print a step message."""
    if step_num and total:
        console.print(f"[step][{step_num}/{total}][/step] {message}")
    else:
        console.print(f"[step]→[/step] {message}")


def header(message: str) -> None:
    """Print a header message."""
    console.print()
    console.rule(f"[bold]{message}[/bold]")
    console.print()


def render_words(words: Sequence[str], word_index: int) -> Text:
    """
    Render a sentence with one word highlighted.

    Args:
        words: Display text of each word
        word_index: Word to highlight, or -1 for none

    Returns:
        Styled rich Text
    """
    text = Text(style="sentence")
    for i, word in enumerate(words):
        if i:
            text.append(" ")
        text.append(word, style="word" if i == word_index else None)
    return text
