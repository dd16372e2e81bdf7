"""Tests for literal rendering, escaping and value parsing."""
import pytest

from ploonbench.errors import EscapeSequenceError, MalformedRowError
from ploonbench.escaping import (
    ABSENT,
    escape_text,
    find_unescaped,
    parse_name,
    parse_value,
    render_name,
    render_scalar,
    render_value,
    split_unescaped,
    unescape,
)


class TestEscapeText:
    """Structural characters are backslash-escaped."""

    def test_pipe_and_backslash(self):
        assert escape_text("a|b\\c") == "a\\|b\\\\c"

    def test_newlines(self):
        assert escape_text("l1\nl2\r") == "l1\\nl2\\r"

    def test_brackets(self):
        assert escape_text("[x]") == "\\[x\\]"

    def test_extra_characters(self):
        assert escape_text("a,b;c", extra=",;") == "a\\,b\\;c"

    def test_comma_untouched_by_default(self):
        assert escape_text("Acme, Inc.") == "Acme, Inc."

    def test_unescape_inverts(self):
        text = "pipe | back \\ open [ close ] nl \n"
        assert unescape(escape_text(text, extra=",;")) == text


class TestUnescapeErrors:
    """Unknown and dangling escapes are rejected."""

    def test_unknown_sequence(self):
        with pytest.raises(EscapeSequenceError, match="Unknown escape"):
            unescape("bad\\q", line=4)

    def test_dangling_backslash(self):
        with pytest.raises(EscapeSequenceError, match="Dangling"):
            unescape("end\\")

    def test_line_number_in_message(self):
        with pytest.raises(EscapeSequenceError) as info:
            unescape("\\x", line=7)
        assert info.value.line == 7
        assert "record 7" in str(info.value)


class TestSplitting:
    """Escaped separators do not split."""

    def test_split_unescaped(self):
        assert split_unescaped("a|b\\|c|d", "|") == ["a", "b\\|c", "d"]

    def test_split_trailing_empty(self):
        assert split_unescaped("a|", "|") == ["a", ""]

    def test_find_unescaped(self):
        assert find_unescaped("a\\]b]", "]") == 4
        assert find_unescaped("abc", "]") == -1


class TestRenderScalar:
    """Canonical literals for scalars."""

    def test_null_in_row_and_array(self):
        assert render_scalar(None) == ""
        assert render_scalar(None, in_array=True) == "null"

    def test_booleans(self):
        assert render_scalar(True) == "true"
        assert render_scalar(False) == "false"

    def test_float_keeps_fraction(self):
        assert render_scalar(15.0) == "15.0"
        assert render_scalar(2.5) == "2.5"

    def test_int(self):
        assert render_scalar(50) == "50"

    def test_numeric_string_quoted(self):
        assert render_scalar("42") == '"42"'

    def test_keyword_string_quoted(self):
        assert render_scalar("true") == '"true"'
        assert render_scalar("null") == '"null"'

    def test_empty_string_quoted(self):
        assert render_scalar("") == '""'

    def test_leading_quote_escaped(self):
        assert render_scalar('"hi"') == '\\"hi"'

    def test_semicolon_only_escaped_when_minified(self):
        assert render_scalar("a;b") == "a;b"
        assert render_scalar("a;b", minify=True) == "a\\;b"

    def test_inline_array(self):
        assert render_value(["a", 1, None, ["b,c"]]) == "[a,1,null,[b\\,c]]"

    def test_empty_inline_array(self):
        assert render_value([]) == "[]"


class TestParseValue:
    """Raw row values back to Python values."""

    def test_empty_is_null(self):
        assert parse_value("") is None

    def test_keywords(self):
        assert parse_value("true") is True
        assert parse_value("false") is False
        assert parse_value("null") is None

    def test_int_and_float(self):
        assert parse_value("50") == 50
        assert isinstance(parse_value("50"), int)
        assert parse_value("15.0") == 15.0
        assert isinstance(parse_value("15.0"), float)
        assert parse_value("1e+16") == 1e16

    def test_quoted_string(self):
        assert parse_value('"42"') == "42"
        assert parse_value('""') == ""

    def test_escaped_leading_quote(self):
        assert parse_value('\\"hi"') == '"hi"'

    def test_absent_marker(self):
        assert parse_value("\\-") is ABSENT

    def test_inline_array(self):
        assert parse_value("[a,1,null,[b\\,c],\"7\"]") == ["a", 1, None, ["b,c"], "7"]

    def test_empty_inline_array(self):
        assert parse_value("[]") == []

    def test_unterminated_array(self):
        with pytest.raises(MalformedRowError):
            parse_value("[a,b")

    def test_unbalanced_array(self):
        with pytest.raises(MalformedRowError):
            parse_value("[a,[b]")

    def test_plain_text(self):
        assert parse_value("Desk Lamp \\| LED") == "Desk Lamp | LED"


class TestNames:
    """Header names escape their own reserved set."""

    def test_reserved_escaped(self):
        assert render_name("a.b#c") == "a\\.b\\#c"
        assert render_name("f(x){}") == "f\\(x\\)\\{\\}"

    def test_empty_name(self):
        assert render_name("") == '""'
        assert parse_name('""') == ""

    def test_roundtrip(self):
        name = "weird,name;*"
        assert parse_name(render_name(name)) == name
