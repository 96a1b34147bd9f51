"""Main entrypoint and UI rendering for slurmtop."""

import getpass
import logging
import os
import select
import sys
import termios
import time
import tty
from pathlib import Path
from typing import List

import tyro
from rich.console import Console, Group
from rich.live import Live
from rich.text import Text

from . import keys
from .config import ConfigError, Settings, load_settings
from .jobs import Job
from .layout import build_table, clamp_line
from .query import QuerySource, SlurmQuerySource
from .snapshot import QueueSnapshot, build_snapshot
from .state import Command, View, ViewState, visible_rows

_LOGGER = logging.getLogger(__name__)

BAR_STYLE = "black on cyan"
TITLE_STYLE = "bold cyan"
FOCUS_STYLE = "bold red"
TOTAL_STYLE = "bold red"

VIEW_KEYS = {View.OVERVIEW: "1", View.RUNNING: "2", View.PENDING: "3", View.ALL: "4"}
VIEW_TITLES = {
    View.RUNNING: "RUNNING JOBS",
    View.PENDING: "PENDING JOBS",
    View.ALL: "ALL JOBS",
}
VIEW_STYLES = {View.RUNNING: "green", View.PENDING: "yellow", View.ALL: "white"}

CONTROLS = (
    "Controls: Up/Down:Scroll  Left/Right:Focus Column  "
    "PgUp/PgDn:Page  R:Refresh  Q:Quit"
)


class TerminalError(RuntimeError):
    """Raised when the interactive screen cannot be set up."""


def _line(text: str = "", style: str = "") -> Text:
    return Text(text, style=style, no_wrap=True, overflow="crop")


def jobs_for_view(snapshot: QueueSnapshot, view: View) -> List[Job]:
    """Rows shown by a table view, in display order."""
    if view is View.RUNNING:
        return snapshot.running_jobs()
    if view is View.PENDING:
        return snapshot.pending_jobs()
    if view is View.ALL:
        return list(snapshot.jobs)
    return []


def render_title_bar(snapshot: QueueSnapshot, view: View, width: int) -> Group:
    """The two highlighted lines at the top: title plus views, and controls."""
    updated = snapshot.timestamp.strftime("%H:%M:%S")
    title = f"  SLURM Top - User: {snapshot.user}  Updated {updated}"
    indicator_x = max(width - 60, 40)
    title_line = _line(title.ljust(indicator_x), style=f"bold {BAR_STYLE}")
    for v, key in VIEW_KEYS.items():
        label = f"[{key}]{v.value}"
        style = f"bold reverse {BAR_STYLE}" if v is view else f"bold {BAR_STYLE}"
        title_line.append(label, style=style)
        title_line.append(" ", style=f"bold {BAR_STYLE}")
    title_line.pad_right(max(width - len(title_line), 0))
    title_line.truncate(width)

    controls = _line(f"  {CONTROLS}".ljust(width), style=BAR_STYLE)
    controls.truncate(width)
    return Group(title_line, controls)


def _gpu_section(
    heading: str, counts: dict, style: str, total_label: str
) -> List[Text]:
    lines = [_line(f"  {heading}", style=TITLE_STYLE), _line()]
    for gpu_type, count in sorted(counts.items()):
        lines.append(_line(f"    {gpu_type:<15}: {count} GPUs", style=style))
    lines.append(_line())
    lines.append(_line(f"    {total_label} {sum(counts.values())} GPUs", style=TOTAL_STYLE))
    return lines


def render_overview(snapshot: QueueSnapshot) -> Group:
    """Job counts and per-type GPU totals."""
    lines = [
        _line("  JOB OVERVIEW", style=TITLE_STYLE),
        _line(),
        _line(f"    Total Jobs: {snapshot.total}"),
        _line(f"    Running:    {snapshot.running}", style="green"),
        _line(f"    Pending:    {snapshot.pending}", style="yellow"),
        _line(),
        _line(),
    ]
    if snapshot.gpus_running:
        lines += _gpu_section(
            "RUNNING - GPU ALLOCATIONS", snapshot.gpus_running, "green", "Total Running: "
        )
        lines += [_line(), _line()]
    if snapshot.gpus_requested:
        lines += _gpu_section(
            "PENDING - GPU REQUESTS", snapshot.gpus_requested, "yellow", "Total Requested:"
        )
    return Group(*lines)


def scroll_indicator(offset: int, page: int, count: int) -> str:
    """e.g. "Showing 21-40 of 75 (Scroll: 36%)"; empty when everything fits."""
    if count <= page:
        return ""
    percent = offset * 100 // max(1, count - page)
    return f"Showing {offset + 1}-{min(offset + page, count)} of {count} (Scroll: {percent}%)"


def render_table_view(
    snapshot: QueueSnapshot, state: ViewState, width: int
) -> Group:
    """Title, header and the visible rows of the active table view."""
    jobs = jobs_for_view(snapshot, state.view)
    table = build_table(
        state.view.columns,
        jobs,
        snapshot,
        width,
        focused=state.focus,
        offset=state.scroll,
        limit=state.page_size,
    )

    header = Text(no_wrap=True, overflow="crop", style="bold")
    for i, cell in enumerate(table.header_cells):
        if i:
            header.append(" ")
        header.append(cell, style=FOCUS_STYLE if i == state.focus else "")
    header.truncate(max(width - 2, 0))

    indicator = scroll_indicator(state.scroll, state.page_size, len(jobs))
    style = VIEW_STYLES[state.view]
    return Group(
        _line(f"  {VIEW_TITLES[state.view]} ({len(jobs)} jobs)", style=TITLE_STYLE),
        _line(clamp_line(f"  {indicator}", width) if indicator else ""),
        header,
        *(_line(row, style=style) for row in table.rows),
    )


def render_screen(snapshot: QueueSnapshot, state: ViewState, width: int) -> Group:
    """The whole screen for the current state."""
    if state.view is View.OVERVIEW:
        body = render_overview(snapshot)
    else:
        body = render_table_view(snapshot, state, width)
    return Group(render_title_bar(snapshot, state.view, width), _line(), body)


def read_commands(fd: int, timeout: float, decoder: keys.KeyDecoder) -> List[Command]:
    """Waits up to `timeout` seconds for input and decodes it."""
    rlist, _, _ = select.select([fd], [], [], timeout)
    if not rlist:
        return []
    return decoder.feed(os.read(fd, 64).decode(errors="ignore"))


def run_interactive(
    source: QuerySource, user: str, settings: Settings, console: Console
) -> None:
    """Runs the full-screen dashboard until the user quits."""
    if not (sys.stdin.isatty() and console.is_terminal):
        raise TerminalError("slurmtop needs an interactive terminal (try --inline)")

    fd = sys.stdin.fileno()
    old_settings = termios.tcgetattr(fd)
    state = ViewState()
    decoder = keys.KeyDecoder()
    snapshot = build_snapshot(source, user)
    last_refresh = time.monotonic()

    try:
        tty.setcbreak(fd)
        with Live(console=console, screen=True, auto_refresh=False) as live:
            size = None
            redraw = True
            while state.running:
                if console.size != size:
                    size = console.size
                    redraw = True
                if redraw:
                    state.page_size = visible_rows(size.height)
                    state.clamp_scroll(len(jobs_for_view(snapshot, state.view)))
                    live.update(render_screen(snapshot, state, size.width), refresh=True)
                    redraw = False

                for command in read_commands(fd, settings.poll_timeout, decoder):
                    if command is Command.REFRESH:
                        snapshot = build_snapshot(source, user)
                        last_refresh = time.monotonic()
                    redraw = state.apply(command) or redraw
                    if not state.running:
                        break

                interval = settings.refresh_interval
                if interval and time.monotonic() - last_refresh >= interval:
                    snapshot = build_snapshot(source, user)
                    last_refresh = time.monotonic()
                    redraw = True
    except KeyboardInterrupt:
        pass  # Clean exit on Ctrl+C
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, old_settings)


def print_inline(snapshot: QueueSnapshot, console: Console) -> None:
    """Prints the overview and the table of all jobs once."""
    console.print(render_overview(snapshot))
    state = ViewState(view=View.ALL, page_size=len(snapshot.jobs))
    console.print(render_table_view(snapshot, state, console.width))


def configure_logging(log_file: str | None) -> None:
    """Sends logs to `log_file`; the live screen leaves no room for them otherwise."""
    if log_file:
        logging.basicConfig(
            filename=log_file,
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
    else:
        logging.basicConfig(handlers=[logging.NullHandler()])


def main(
    user: str | None = None,
    config: Path | None = None,
    refresh_interval: float | None = None,
    poll_timeout: float | None = None,
    inline: bool = False,
    log_file: str | None = None,
) -> int:
    """slurmtop: A top-like viewer for one user's Slurm jobs.

    Args:
        user: User whose jobs are shown (default: current user).
        config: YAML settings file.
        refresh_interval: Seconds between automatic refreshes (0 disables).
        poll_timeout: Seconds to wait for a key press per loop.
        inline: Print the overview and job table once instead of the live view.
        log_file: Write debug logs to this file.
    """
    console = Console()
    try:
        settings = load_settings(config).override(
            refresh_interval=refresh_interval,
            poll_timeout=poll_timeout,
            log_file=log_file,
        )
    except ConfigError as exc:
        console.print(f"[bold red]Configuration error:[/bold red] {exc}")
        return 2

    configure_logging(settings.log_file)
    user = user or getpass.getuser()
    source = SlurmQuerySource(squeue=settings.squeue, scontrol=settings.scontrol)

    if inline:
        print_inline(build_snapshot(source, user), console)
        return 0

    try:
        run_interactive(source, user, settings, console)
    except TerminalError as exc:
        _LOGGER.error("%s", exc)
        console.print(f"[bold red]Error:[/bold red] {exc}")
        return 1
    return 0


def _cli() -> int:
    return tyro.cli(main)
