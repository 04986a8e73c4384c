"""Tests for shell argument escaping."""
from cmdrunner.quoting import escape, escape_arguments, join_arguments, wrap_in_quotes


class TestEscape:
    """Test escaping of a single token."""

    def test_space_is_escaped(self):
        assert escape(" ") == "\\ "

    def test_backslash_is_doubled(self):
        assert escape("\\") == "\\\\"

    def test_single_quote_is_unchanged(self):
        assert escape("'") == "'"

    def test_double_quote_is_unchanged(self):
        assert escape('"') == '"'

    def test_plain_characters_are_unchanged(self):
        assert escape("a") == "a"
        assert escape("file-1.txt") == "file-1.txt"

    def test_shell_metacharacters_are_not_escaped(self):
        """Only spaces and backslashes are handled, the rest reaches sh as-is."""
        assert escape(">") == ">"
        assert escape("$HOME") == "$HOME"
        assert escape("`id`") == "`id`"
        assert escape("*.txt") == "*.txt"

    def test_mixed_token(self):
        assert escape("a b\\c") == "a\\ b\\\\c"

    def test_multiple_spaces(self):
        assert escape("first  second") == "first\\ \\ second"

    def test_empty_token(self):
        assert escape("") == ""


class TestHelpers:
    """Test joining and wrapping helpers."""

    def test_escape_arguments(self):
        assert escape_arguments(["cat", "first second.txt"]) == ["cat", "first\\ second.txt"]

    def test_join_arguments_does_not_escape(self):
        assert join_arguments(["echo", "a b"]) == "echo a b"

    def test_wrap_in_quotes(self):
        assert wrap_in_quotes("cat first\\ second.txt") == '"cat first\\ second.txt"'

    def test_wrap_in_custom_quote(self):
        assert wrap_in_quotes("ls", quote="'") == "'ls'"
