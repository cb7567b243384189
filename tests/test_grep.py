import io

import pytest

from xv6tools.grep import grep, main, match


@pytest.mark.parametrize(
    "pattern, text, expected",
    [
        ("abc", "xxabcxx", True),
        ("abc", "xxabxx", False),
        ("^abc", "abcdef", True),
        ("^abc", "xabc", False),
        ("a.c", "abc", True),
        ("a.c", "ac", False),
        ("ab*c", "ac", True),
        ("ab*c", "abbbbc", True),
        ("c$", "abc", True),
        ("c$", "abcd", False),
        ("", "anything", True),
        (".*", "", True),
        ("^$", "", True),
        ("^$", "x", False),
        ("a.*z", "a middle z", True),
    ],
)
def test_match(pattern, text, expected):
    assert match(pattern, text) is expected


def test_grep_selects_matching_lines():
    out = io.StringIO()
    grep("foo", io.StringIO("foo\nbar\nfoobar\n"), out)
    assert out.getvalue() == "foo\nfoobar\n"


def test_grep_drops_unterminated_last_line():
    out = io.StringIO()
    grep("foo", io.StringIO("foo\nfoo"), out)
    assert out.getvalue() == "foo\n"


def test_grep_drops_overlong_line():
    out = io.StringIO()
    long_line = "x" * 2000
    grep("x", io.StringIO(long_line + "\nxy\n"), out)
    assert "xy\n" in out.getvalue()
    assert long_line not in out.getvalue()


def test_grep_output_lines_all_match():
    text = "".join(f"line {i}\n" for i in range(300))
    out = io.StringIO()
    grep("1.$", io.StringIO(text), out)
    lines = out.getvalue().splitlines()
    assert lines
    assert all(match("1.$", line) for line in lines)


def test_main_usage(capsys):
    assert main([]) == 0
    assert "usage: grep pattern [file ...]" in capsys.readouterr().err


def test_main_files(tmp_path, capsys):
    path = tmp_path / "input.txt"
    path.write_text("alpha\nbeta\ngamma\n")
    assert main(["^.a", str(path)]) == 0
    assert capsys.readouterr().out == "gamma\n"


def test_main_missing_file(tmp_path, capsys):
    missing = tmp_path / "nope"
    main(["x", str(missing)])
    assert capsys.readouterr().out == f"grep: cannot open {missing}\n"