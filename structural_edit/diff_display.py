"""
Diff display: color an edit preview for the terminal.
"""

from __future__ import annotations

from .editing.diff_report import TRUNCATION_MARKER


def format_colored_diff(preview: str, path: str | None = None) -> str:
    """Add ANSI colors to an edit preview.

    Green for additions (+), red for deletions (-), dim for the truncation
    marker.  A bold header naming *path* is prepended when given.
    """
    colored: list[str] = []
    if path:
        colored.append(f"\033[1m{path}\033[0m")  # bold
    for line in preview.split("\n"):
        if line == TRUNCATION_MARKER:
            colored.append(f"\033[2m{line}\033[0m")  # dim
        elif line.startswith("+"):
            colored.append(f"\033[32m{line}\033[0m")  # green
        elif line.startswith("-"):
            colored.append(f"\033[31m{line}\033[0m")  # red
        else:
            colored.append(line)
    return "\n".join(colored)
