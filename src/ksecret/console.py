"""Rich console utilities for styled terminal output.

Status lines go to standard output and errors to standard error. Secret values
are never printed through these helpers; they are written raw by the
orchestrator so that markup and wrapping cannot alter them.
"""

from collections.abc import Generator
from contextlib import contextmanager

from rich.console import Console
from rich.theme import Theme

_THEME = Theme(
    {
        "info": "cyan",
        "success": "green",
        "warning": "yellow",
        "error": "red bold",
        "highlight": "cyan bold",
    }
)

console = Console(theme=_THEME)
err_console = Console(theme=_THEME, stderr=True)


def success(message: str) -> None:
    """Print a success message.

    Args:
        message: The message to display.

    """
    console.print(f"[success]✓[/success] {message}")


def warning(message: str) -> None:
    """Print a warning message to standard error.

    Args:
        message: The message to display.

    """
    err_console.print(f"[warning]⚠[/warning] {message}")


def error(message: str) -> None:
    """Print an error message to standard error.

    Args:
        message: The message to display.

    """
    err_console.print(f"[error]✗[/error] {message}")


def action(message: str) -> None:
    """Print an action/progress message.

    Args:
        message: The message to display.

    """
    console.print(f"[info]→[/info] {message}")


def highlight(text: str) -> str:
    """Return text wrapped in highlight markup."""
    return f"[highlight]{text}[/highlight]"


@contextmanager
def spinner(message: str) -> Generator[None, None, None]:
    """Display a transient spinner while a blocking call runs.

    Rich only animates the spinner on a terminal, so redirected output is
    left untouched.

    Args:
        message: The status message to display.

    Yields:
        None

    """
    with console.status(f"[info]{message}[/info]", spinner="dots"):
        yield
