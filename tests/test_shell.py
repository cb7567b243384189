import pytest

from xv6tools.layout import O_CREATE, O_RDONLY, O_WRONLY
from xv6tools.shell import (
    BackCommand,
    ExecCommand,
    ListCommand,
    PipeCommand,
    RedirCommand,
    ShellSyntaxError,
    parse_command,
)

WRITE = O_WRONLY | O_CREATE


def test_simple_exec():
    assert parse_command("echo hi there\n") == ExecCommand(["echo", "hi", "there"])


def test_empty_line_is_empty_exec():
    assert parse_command("") == ExecCommand([])
    assert parse_command("  \t\n") == ExecCommand([])


def test_redirections_nest_in_order():
    cmd = parse_command("ls > out < in")
    assert cmd == RedirCommand(
        RedirCommand(ExecCommand(["ls"]), "out", WRITE, 1), "in", O_RDONLY, 0
    )


def test_append_redirection_uses_write_mode():
    assert parse_command(">> f") == RedirCommand(ExecCommand([]), "f", WRITE, 1)


def test_word_stops_at_symbol():
    assert parse_command("echo a>b") == RedirCommand(
        ExecCommand(["echo", "a"]), "b", WRITE, 1
    )


def test_pipes_are_right_associative():
    assert parse_command("a | b | c") == PipeCommand(
        ExecCommand(["a"]), PipeCommand(ExecCommand(["b"]), ExecCommand(["c"]))
    )


def test_lists_are_right_associative():
    assert parse_command("a ; b ; c") == ListCommand(
        ExecCommand(["a"]), ListCommand(ExecCommand(["b"]), ExecCommand(["c"]))
    )


def test_background_repeats_and_lists():
    assert parse_command("a & &") == BackCommand(BackCommand(ExecCommand(["a"])))
    assert parse_command("a & ; b") == ListCommand(
        BackCommand(ExecCommand(["a"])), ExecCommand(["b"])
    )


def test_block_with_redirection():
    assert parse_command("(a ; b) > f") == RedirCommand(
        ListCommand(ExecCommand(["a"]), ExecCommand(["b"])), "f", WRITE, 1
    )


def test_pipe_of_block():
    assert parse_command("(x) | y") == PipeCommand(ExecCommand(["x"]), ExecCommand(["y"]))


def test_missing_redirection_file():
    with pytest.raises(ShellSyntaxError, match="missing file for redirection"):
        parse_command("a >")


def test_missing_close_paren():
    with pytest.raises(ShellSyntaxError, match="missing"):
        parse_command("(a")


def test_leftovers():
    with pytest.raises(ShellSyntaxError) as info:
        parse_command("a )")
    assert info.value.leftovers == ")"


def test_unexpected_token():
    with pytest.raises(ShellSyntaxError, match="syntax"):
        parse_command("a (")


def test_argument_limit():
    words = [str(i) for i in range(9)]
    assert parse_command(" ".join(words)) == ExecCommand(words)
    with pytest.raises(ShellSyntaxError, match="too many args"):
        parse_command(" ".join(str(i) for i in range(10)))