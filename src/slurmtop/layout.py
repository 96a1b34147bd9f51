"""Column width assignment and row formatting for the job tables.

Tables are laid out as fixed-width text: every column gets a width, cells
are padded or truncated to it and columns are joined by a single space.
Widths are recomputed on every draw from the full row set, the terminal
width and the focused column, so the same inputs always give the same
layout.

Without a focused column, columns first get the width their content needs;
spare room is shared out proportionally to those needs, and a table that
does not fit is shrunk proportionally down to per-column minimums.

With a focused column, that column gets its full content width (plus room
for the brackets around its header) and the rest of the terminal is split
evenly between the other columns.
"""

import dataclasses
from typing import Sequence

from .columns import Column
from .jobs import Job
from .snapshot import QueueSnapshot

MAX_REQUIRED_WIDTH = 50
MAX_BONUS = 20
FOCUS_DECORATION = 2
MARGIN = 2
ELLIPSIS = "..."


def required_width(header: str, values: Sequence[str]) -> int:
    """Width a column needs: its longest text plus one space, capped at 50."""
    longest = max([len(header)] + [len(v) for v in values])
    return min(longest + 1, MAX_REQUIRED_WIDTH)


def available_width(terminal_width: int, num_columns: int) -> int:
    """Terminal width minus column separators and the right margin."""
    return max(0, terminal_width - (num_columns - 1) - MARGIN)


def _spread(widths: list[int], leftover: int, indices: Sequence[int]) -> int:
    for i in indices:
        if leftover <= 0:
            break
        widths[i] += 1
        leftover -= 1
    return leftover


def _unfocused_widths(
    available: int, required: Sequence[int], min_widths: Sequence[int]
) -> list[int]:
    total = sum(required)
    if total <= 0:
        return [0 for _ in required]

    if total > available:
        # May end up wider than `available`; rows are clamped when formatted.
        return [
            max(req * available // total, floor)
            for req, floor in zip(required, min_widths)
        ]

    widths = list(required)
    extra = available - total
    for i, req in enumerate(required):
        if extra <= 0:
            break
        bonus = min(req * extra // total, MAX_BONUS)
        widths[i] += bonus
        extra -= bonus
    _spread(widths, extra, range(len(widths)))
    return widths


def _focused_widths(available: int, required: Sequence[int], focused: int) -> list[int]:
    widths = [0] * len(required)
    widths[focused] = min(required[focused] + FOCUS_DECORATION, available)

    others = [i for i in range(len(required)) if i != focused]
    if not others:
        return widths

    remaining = available - widths[focused]
    share = remaining // len(others)
    for i in others:
        widths[i] = min(required[i], share)

    leftover = remaining - sum(widths[i] for i in others)
    for i in others:
        if leftover <= 0:
            break
        grow = min(required[i] - widths[i], leftover)
        if grow > 0:
            widths[i] += grow
            leftover -= grow
    _spread(widths, leftover, others)
    return widths


def compute_column_widths(
    terminal_width: int,
    required: Sequence[int],
    min_widths: Sequence[int],
    focused: int = -1,
) -> list[int]:
    """Assigns a width to every column.

    Args:
        terminal_width: Width of the terminal in characters.
        required: Width each column needs to show its longest cell.
        min_widths: Floor applied to each column when the table overflows.
        focused: Index of the focused column, or -1 for none.

    Returns:
        One width per column, in column order.
    """
    available = available_width(terminal_width, len(required))
    if 0 <= focused < len(required):
        return _focused_widths(available, required, focused)
    return _unfocused_widths(available, required, min_widths)


def fit_cell(text: str, width: int, ellipsis: bool) -> str:
    """Truncates `text` to `width`, ending in "..." for free-text columns."""
    if len(text) <= width:
        return text
    if ellipsis and width >= len(ELLIPSIS):
        return text[: width - len(ELLIPSIS)] + ELLIPSIS
    return text[: max(width, 0)]


def clamp_line(line: str, terminal_width: int) -> str:
    return line[: max(terminal_width - MARGIN, 0)]


def format_header_cells(
    headers: Sequence[str], widths: Sequence[int], focused: int = -1
) -> list[str]:
    """Header cells padded to their widths; the focused one is bracketed."""
    cells = []
    for i, (header, width) in enumerate(zip(headers, widths)):
        if i == focused:
            header = f"[{header}]"
        cells.append(header[: max(width, 0)].ljust(width))
    return cells


def format_row(
    cells: Sequence[str],
    columns: Sequence[Column],
    widths: Sequence[int],
    terminal_width: int,
    focused: int = -1,
) -> str:
    """Joins cells into one display line no wider than the terminal allows.

    The focused cell is never truncated, even if it overflows its width.
    """
    parts = []
    for i, (text, column, width) in enumerate(zip(cells, columns, widths)):
        if i != focused:
            text = fit_cell(text, width, column.ellipsis)
        parts.append(text.ljust(width))
    return clamp_line(" ".join(parts), terminal_width)


@dataclasses.dataclass
class TableLayout:
    """Everything a renderer needs to draw one table."""

    widths: list[int]
    header_cells: list[str]
    rows: list[str]
    focused: int = -1

    @property
    def header(self) -> str:
        return " ".join(self.header_cells)


def build_table(
    columns: Sequence[Column],
    jobs: Sequence[Job],
    snapshot: QueueSnapshot,
    terminal_width: int,
    focused: int = -1,
    offset: int = 0,
    limit: int | None = None,
) -> TableLayout:
    """Lays out `jobs` and formats the rows in the visible window.

    Widths take every job into account, not only the visible ones, so that
    scrolling does not make columns jump around.
    """
    table = [[column.cell(job, snapshot) for column in columns] for job in jobs]
    required = [
        required_width(column.header, [row[i] for row in table])
        for i, column in enumerate(columns)
    ]
    widths = compute_column_widths(
        terminal_width, required, [c.min_width for c in columns], focused
    )

    end = None if limit is None else offset + limit
    rows = [
        format_row(cells, columns, widths, terminal_width, focused)
        for cells in table[offset:end]
    ]
    return TableLayout(
        widths=widths,
        header_cells=format_header_cells([c.header for c in columns], widths, focused),
        rows=rows,
        focused=focused,
    )
