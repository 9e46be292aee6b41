"""Styling for the questionary context picker."""

from questionary import Style

PROMPT_STYLE = Style(
    [
        ("qmark", "fg:#5fafff bold"),
        ("question", "bold"),
        ("answer", "fg:#5fd7af bold"),
        ("pointer", "fg:#5fd7af bold"),
        ("highlighted", "fg:#5fd7af bold"),
        ("instruction", "fg:#8a8a8a italic"),
    ]
)

POINTER = "> "
QMARK = "? "
