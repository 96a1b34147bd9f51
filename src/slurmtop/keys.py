"""Translation of raw terminal input into commands."""

from .state import Command

KEYMAP = {
    "1": Command.SHOW_OVERVIEW,
    "2": Command.SHOW_RUNNING,
    "3": Command.SHOW_PENDING,
    "4": Command.SHOW_ALL,
    "q": Command.QUIT,
    "Q": Command.QUIT,
    "r": Command.REFRESH,
    "R": Command.REFRESH,
}

ESCAPE_SEQUENCES = {
    "\x1b[A": Command.SCROLL_UP,
    "\x1b[B": Command.SCROLL_DOWN,
    "\x1b[C": Command.FOCUS_RIGHT,
    "\x1b[D": Command.FOCUS_LEFT,
    "\x1bOA": Command.SCROLL_UP,
    "\x1bOB": Command.SCROLL_DOWN,
    "\x1bOC": Command.FOCUS_RIGHT,
    "\x1bOD": Command.FOCUS_LEFT,
    "\x1b[5~": Command.PAGE_UP,
    "\x1b[6~": Command.PAGE_DOWN,
}


def _is_partial(tail: str) -> bool:
    return any(len(tail) < len(seq) and seq.startswith(tail) for seq in ESCAPE_SEQUENCES)


def _decode(data: str) -> tuple[list[Command], str]:
    commands = []
    i = 0
    while i < len(data):
        if data[i] == "\x1b":
            for seq, command in ESCAPE_SEQUENCES.items():
                if data.startswith(seq, i):
                    commands.append(command)
                    i += len(seq)
                    break
            else:
                if _is_partial(data[i:]):
                    return commands, data[i:]
                # Lone escape or an unsupported sequence: skip the ESC only.
                i += 1
            continue
        command = KEYMAP.get(data[i])
        if command is not None:
            commands.append(command)
        i += 1
    return commands, ""


def decode(data: str) -> list[Command]:
    """Decodes a chunk of terminal input; unknown keys are dropped."""
    return _decode(data)[0]


class KeyDecoder:
    """Decodes successive reads, holding back an escape sequence cut in two."""

    def __init__(self) -> None:
        self.pending = ""

    def feed(self, data: str) -> list[Command]:
        commands, self.pending = _decode(self.pending + data)
        return commands
