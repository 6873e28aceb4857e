"""Console interaction used by the pipeline.

The pipeline only talks to an :class:`Interaction`; the CLI passes a
:class:`ConsoleInteraction`, tests pass a scripted one.
"""

from __future__ import annotations

import sys
from typing import Protocol, TextIO


class Interaction(Protocol):
    """What the pipeline needs from the user."""

    def confirm(self, question: str) -> bool: ...

    def choose(self, prompt: str, options: dict[str, str]) -> str: ...

    def ask(self, prompt: str) -> str: ...

    def show(self, message: str) -> None: ...


class ConsoleInteraction:
    """Terminal implementation reading single keystrokes.

    On a TTY keys are read in raw mode so no Enter is needed; otherwise
    (pipes, CI) a whole line is read and its first character used.
    """

    def __init__(self, stdin: TextIO | None = None, stdout: TextIO | None = None) -> None:
        self._in = stdin or sys.stdin
        self._out = stdout or sys.stdout

    def show(self, message: str) -> None:
        self._out.write(message + "\n")
        self._out.flush()

    def confirm(self, question: str) -> bool:
        while True:
            self._prompt(f"{question} [y/n] ")
            key = self._read_key().lower()
            self.show(key)
            if key in ("y", "n"):
                return key == "y"

    def choose(self, prompt: str, options: dict[str, str]) -> str:
        """Show *options* (key -> description) and return the chosen key."""
        keys = {k.lower(): k for k in options}
        self.show(prompt)
        for k, desc in options.items():
            self.show(f"  {k}) {desc}")
        while True:
            self._prompt("> ")
            key = self._read_key().lower()
            self.show(key)
            if key in keys:
                return keys[key]

    def ask(self, prompt: str) -> str:
        self._prompt(f"{prompt}: ")
        line = self._in.readline()
        if not line:
            raise EOFError("stdin closed")
        return line.strip()

    # ------------------------------------------------------------------

    def _prompt(self, text: str) -> None:
        self._out.write(text)
        self._out.flush()

    def _read_key(self) -> str:
        if self._in.isatty():
            return _read_raw_key(self._in)
        line = self._in.readline()
        if not line:
            raise EOFError("stdin closed")
        return line.strip()[:1]


def _read_raw_key(stream: TextIO) -> str:
    import termios
    import tty

    fd = stream.fileno()
    old = termios.tcgetattr(fd)
    try:
        tty.setraw(fd)
        ch = stream.read(1)
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, old)
    if ch == "\x03":
        raise KeyboardInterrupt
    return ch
