"""
Diff & change reporter: line diff, coalesced edit ranges, capped preview.

Edit ranges use a context-line counter: it only advances over unchanged
lines, so ``start``/``end`` point into the original file's unchanged-line
coordinates rather than at byte offsets.
"""

from __future__ import annotations

import difflib
from dataclasses import dataclass, field

PREVIEW_MAX_LINES = 400
TRUNCATION_MARKER = "... (diff truncated)"

_PREFIXES = {"equal": " ", "removed": "-", "added": "+"}


@dataclass(frozen=True)
class EditRange:
    """One contiguous changed region."""
    start: int
    end: int

    def to_dict(self) -> dict:
        return {"start": self.start, "end": self.end}


@dataclass
class DiffChunk:
    """A run of lines that are all unchanged, all removed or all added."""
    kind: str  # "equal" | "removed" | "added"
    lines: list[str] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.lines)

    @property
    def changed(self) -> bool:
        return self.kind != "equal"


def split_lines(text: str) -> list[str]:
    """Split on ``\\n`` only, keeping the terminator on every line but the last."""
    parts = text.split("\n")
    lines = [part + "\n" for part in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines


def _append(chunks: list[DiffChunk], kind: str, lines: list[str]) -> None:
    if not lines:
        return
    if chunks and chunks[-1].kind == kind:
        chunks[-1].lines.extend(lines)
    else:
        chunks.append(DiffChunk(kind, list(lines)))


def diff_lines(old: str, new: str) -> list[DiffChunk]:
    """Line diff of *old* against *new* as an ordered list of chunks.

    A replaced block comes back as a ``removed`` chunk followed by an
    ``added`` chunk.
    """
    a, b = split_lines(old), split_lines(new)
    shortest = min(len(a), len(b))

    prefix = 0
    while prefix < shortest and a[prefix] == b[prefix]:
        prefix += 1
    suffix = 0
    while suffix < shortest - prefix and a[-1 - suffix] == b[-1 - suffix]:
        suffix += 1

    chunks: list[DiffChunk] = []
    _append(chunks, "equal", a[:prefix])

    mid_a = a[prefix:len(a) - suffix]
    mid_b = b[prefix:len(b) - suffix]
    matcher = difflib.SequenceMatcher(None, mid_a, mid_b, autojunk=False)
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            _append(chunks, "equal", mid_a[i1:i2])
            continue
        _append(chunks, "removed", mid_a[i1:i2])
        _append(chunks, "added", mid_b[j1:j2])

    _append(chunks, "equal", a[len(a) - suffix:])
    return chunks


def compute_edits(chunks: list[DiffChunk]) -> list[EditRange]:
    """Collapse each run of changed chunks into one ``EditRange``.

    A run closed by unchanged lines ends at ``counter - 1`` (never before
    its start); a run that reaches the end of the file ends at the counter.
    """
    edits: list[EditRange] = []
    counter = 0
    start = -1
    for chunk in chunks:
        if chunk.changed:
            if start == -1:
                start = counter
            continue
        if start != -1:
            edits.append(EditRange(start, max(start, counter - 1)))
            start = -1
        counter += chunk.count
    if start != -1:
        edits.append(EditRange(start, counter))
    return edits


def render_preview(chunks: list[DiffChunk], max_lines: int = PREVIEW_MAX_LINES) -> str:
    """Render chunks as ``+``/``-``/space prefixed lines, capped at *max_lines*."""
    lines: list[str] = []
    for chunk in chunks:
        prefix = _PREFIXES[chunk.kind]
        for line in chunk.lines:
            if len(lines) >= max_lines:
                lines.append(TRUNCATION_MARKER)
                return "\n".join(lines)
            lines.append(prefix + (line[:-1] if line.endswith("\n") else line))
    return "\n".join(lines)
