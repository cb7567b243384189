"""Parser for the shell's command language: words, redirections, pipes, lists and background jobs."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from xv6tools.layout import O_CREATE, O_RDONLY, O_WRONLY

MAXARGS = 10

_WHITESPACE = " \t\r\n\v"
_SYMBOLS = "<|>&;()"
_SINGLE = "|();&<"


class ShellSyntaxError(ValueError):
    """Raised when a command line cannot be parsed."""

    def __init__(self, message: str, leftovers: str | None = None) -> None:
        super().__init__(message)
        self.leftovers = leftovers


@dataclass
class ExecCommand:
    """Run a program with its arguments."""

    argv: list[str] = field(default_factory=list)


@dataclass
class RedirCommand:
    """Run a command with one file descriptor redirected to a file."""

    cmd: "Command"
    file: str
    mode: int
    fd: int


@dataclass
class PipeCommand:
    """Connect the output of left to the input of right."""

    left: "Command"
    right: "Command"


@dataclass
class ListCommand:
    """Run left, wait for it, then run right."""

    left: "Command"
    right: "Command"


@dataclass
class BackCommand:
    """Run a command without waiting for it."""

    cmd: "Command"


Command = Union[ExecCommand, RedirCommand, PipeCommand, ListCommand, BackCommand]


class _Parser:
    def __init__(self, line: str) -> None:
        self.text = line.split("\0", 1)[0]
        self.pos = 0

    def _skip(self) -> None:
        while self.pos < len(self.text) and self.text[self.pos] in _WHITESPACE:
            self.pos += 1

    def _current(self) -> str:
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def at_end(self) -> bool:
        self._skip()
        return self.pos == len(self.text)

    def peek(self, toks: str) -> bool:
        self._skip()
        c = self._current()
        return bool(c) and c in toks

    def gettoken(self) -> tuple[str, str]:
        """Return the token kind and its text; kind "" means end of input."""
        self._skip()
        start = self.pos
        c = self._current()
        if not c:
            kind = ""
        elif c in _SINGLE:
            kind = c
            self.pos += 1
        elif c == ">":
            kind = ">"
            self.pos += 1
            if self._current() == ">":
                kind = "+"
                self.pos += 1
        else:
            kind = "a"
            while (
                self.pos < len(self.text)
                and self.text[self.pos] not in _WHITESPACE
                and self.text[self.pos] not in _SYMBOLS
            ):
                self.pos += 1
        word = self.text[start:self.pos]
        self._skip()
        return kind, word

    def parse_line(self) -> Command:
        cmd = self.parse_pipe()
        while self.peek("&"):
            self.gettoken()
            cmd = BackCommand(cmd)
        if self.peek(";"):
            self.gettoken()
            cmd = ListCommand(cmd, self.parse_line())
        return cmd

    def parse_pipe(self) -> Command:
        cmd = self.parse_exec()
        if self.peek("|"):
            self.gettoken()
            cmd = PipeCommand(cmd, self.parse_pipe())
        return cmd

    def parse_redirs(self, cmd: Command) -> Command:
        while self.peek("<>"):
            tok, _ = self.gettoken()
            kind, word = self.gettoken()
            if kind != "a":
                raise ShellSyntaxError("missing file for redirection")
            if tok == "<":
                cmd = RedirCommand(cmd, word, O_RDONLY, 0)
            else:
                # ">" and ">>" both create-or-overwrite
                cmd = RedirCommand(cmd, word, O_WRONLY | O_CREATE, 1)
        return cmd

    def parse_block(self) -> Command:
        if not self.peek("("):
            raise ShellSyntaxError("parseblock")
        self.gettoken()
        cmd = self.parse_line()
        if not self.peek(")"):
            raise ShellSyntaxError("syntax - missing )")
        self.gettoken()
        return self.parse_redirs(cmd)

    def parse_exec(self) -> Command:
        if self.peek("("):
            return self.parse_block()
        exec_cmd = ExecCommand()
        ret: Command = self.parse_redirs(exec_cmd)
        while not self.peek("|)&;"):
            kind, word = self.gettoken()
            if kind == "":
                break
            if kind != "a":
                raise ShellSyntaxError("syntax")
            exec_cmd.argv.append(word)
            if len(exec_cmd.argv) >= MAXARGS:
                raise ShellSyntaxError("too many args")
            ret = self.parse_redirs(ret)
        return ret


def parse_command(line: str) -> Command:
    """Parse one command line into a command tree."""
    parser = _Parser(line)
    cmd = parser.parse_line()
    if not parser.at_end():
        raise ShellSyntaxError("syntax", leftovers=parser.text[parser.pos:])
    return cmd