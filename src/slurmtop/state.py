"""Navigation state: active view, scroll offset and focused column."""

import dataclasses
import enum

from .columns import JOB_TABLE_COLUMNS, PENDING_TABLE_COLUMNS, Column

CHROME_LINES = 6
NO_FOCUS = -1


class View(enum.Enum):
    OVERVIEW = "Overview"
    RUNNING = "Running"
    PENDING = "Pending"
    ALL = "All"

    @property
    def columns(self) -> list[Column]:
        """Table columns shown by this view (none for the overview)."""
        if self is View.OVERVIEW:
            return []
        if self is View.PENDING:
            return PENDING_TABLE_COLUMNS
        return JOB_TABLE_COLUMNS


class Command(enum.Enum):
    SHOW_OVERVIEW = "show_overview"
    SHOW_RUNNING = "show_running"
    SHOW_PENDING = "show_pending"
    SHOW_ALL = "show_all"
    SCROLL_UP = "scroll_up"
    SCROLL_DOWN = "scroll_down"
    PAGE_UP = "page_up"
    PAGE_DOWN = "page_down"
    FOCUS_LEFT = "focus_left"
    FOCUS_RIGHT = "focus_right"
    REFRESH = "refresh"
    QUIT = "quit"


VIEW_COMMANDS = {
    Command.SHOW_OVERVIEW: View.OVERVIEW,
    Command.SHOW_RUNNING: View.RUNNING,
    Command.SHOW_PENDING: View.PENDING,
    Command.SHOW_ALL: View.ALL,
}


def visible_rows(terminal_height: int) -> int:
    """Table rows that fit below the header, title and footer lines."""
    return max(terminal_height - CHROME_LINES, 0)


@dataclasses.dataclass
class ViewState:
    """What the user is looking at.

    `page_size` is the number of visible table rows; the renderer updates it
    from the terminal height before every draw.
    """

    view: View = View.OVERVIEW
    scroll: int = 0
    focus: int = NO_FOCUS
    page_size: int = 0
    running: bool = True

    @property
    def max_column(self) -> int:
        return len(self.view.columns) - 1

    def switch(self, view: View) -> None:
        self.view = view
        self.scroll = 0
        self.focus = NO_FOCUS

    def move_focus(self, step: int) -> None:
        """Cycles focus through none, 0, ..., max_column and back to none."""
        if self.view is View.OVERVIEW:
            return
        span = self.max_column + 2
        self.focus = (self.focus + 1 + step) % span - 1

    def scroll_by(self, delta: int) -> None:
        self.scroll = max(self.scroll + delta, 0)

    def clamp_scroll(self, item_count: int) -> None:
        """Keeps the last page full instead of scrolling into blank rows."""
        self.scroll = max(min(self.scroll, item_count - self.page_size), 0)

    def apply(self, command: Command) -> bool:
        """Updates the state for `command` and returns whether to redraw.

        REFRESH only resets the scroll position here; rebuilding the snapshot
        is up to the caller.
        """
        if command in VIEW_COMMANDS:
            self.switch(VIEW_COMMANDS[command])
        elif command is Command.SCROLL_UP:
            self.scroll_by(-1)
        elif command is Command.SCROLL_DOWN:
            self.scroll_by(1)
        elif command is Command.PAGE_UP:
            self.scroll_by(-self.page_size)
        elif command is Command.PAGE_DOWN:
            self.scroll_by(self.page_size)
        elif command is Command.FOCUS_LEFT:
            self.move_focus(-1)
        elif command is Command.FOCUS_RIGHT:
            self.move_focus(1)
        elif command is Command.REFRESH:
            self.scroll = 0
        elif command is Command.QUIT:
            self.running = False
            return False
        return True
