import io

import pytest

from xv6tools.ulib import atoi, gets, printf, sprintf, strcmp


@pytest.mark.parametrize(
    "text, expected",
    [("123", 123), ("42abc", 42), ("", 0), ("-5", 0), (b"77", 77), ("12\x0034", 12)],
)
def test_atoi(text, expected):
    assert atoi(text) == expected


def test_strcmp_equal_and_order():
    assert strcmp("abc", "abc") == 0
    assert strcmp("abc", "abd") < 0
    assert strcmp("abd", "abc") > 0
    assert strcmp("a", "") == ord("a")
    assert strcmp("", "a") == -ord("a")


def test_strcmp_is_antisymmetric():
    pairs = [("apple", "apply"), ("x", "xyz"), ("zz", "a")]
    for p, q in pairs:
        assert strcmp(p, q) == -strcmp(q, p)


def test_sprintf_decimal():
    assert sprintf("%d", -42) == "-42"
    assert sprintf("n=%d!", 7) == "n=7!"
    assert sprintf("%d", 0) == "0"


def test_sprintf_hex_is_unsigned_upper():
    assert sprintf("%x", 0xABC) == "ABC"
    assert sprintf("%x", -1) == "FFFFFFFF"
    assert sprintf("%p", 0x10) == "10"


def test_sprintf_int_min():
    assert sprintf("%d", -2147483648) == "-2147483648"


@pytest.mark.parametrize("n", [0, 1, 9, 10, 255, 65535, 2**31 - 1])
def test_sprintf_round_trips(n):
    assert int(sprintf("%d", n)) == n
    assert int(sprintf("%d", -n)) == -n
    assert int(sprintf("%x", n), 16) == n


def test_sprintf_strings_and_chars():
    assert sprintf("%s and %s", "cat", "dog") == "cat and dog"
    assert sprintf("%s", None) == "(null)"
    assert sprintf("%c", ord("Z")) == "Z"
    assert sprintf("%c", "Q") == "Q"


def test_sprintf_percent_and_unknown():
    assert sprintf("100%%") == "100%"
    assert sprintf("%q") == "%q"
    assert sprintf("end%") == "end"


def test_sprintf_missing_argument():
    with pytest.raises(TypeError):
        sprintf("%d %d", 1)


def test_printf_writes_to_stream():
    out = io.StringIO()
    printf(out, "%s %d\n", "pid", 3)
    assert out.getvalue() == "pid 3\n"


def test_gets_reads_one_line():
    stream = io.StringIO("hello\nworld")
    assert gets(stream, 100) == "hello\n"
    assert gets(stream, 100) == "world"
    assert gets(stream, 100) == ""


def test_gets_respects_limit():
    stream = io.StringIO("hello\n")
    assert gets(stream, 4) == "hel"
    assert gets(stream, 1) == ""


def test_gets_stops_at_carriage_return():
    assert gets(io.StringIO("ab\rcd"), 10) == "ab\r"