"""Test error messages, position accuracy, and context snippets."""

import pytest

from shellhl.errors import ConfigError, LexError
from shellhl.lexer import tokenize


class TestErrorPositions:
    def test_unterminated_single_quote(self):
        with pytest.raises(LexError, match="unterminated single-quoted string") as exc_info:
            tokenize("echo it's")
        err = exc_info.value
        assert err.position.line == 1
        assert err.position.column == 8

    def test_unterminated_double_quote(self):
        with pytest.raises(LexError, match="unterminated double-quoted string") as exc_info:
            tokenize('echo "abc')
        assert exc_info.value.position.column == 6

    def test_unterminated_parameter_expansion(self):
        with pytest.raises(LexError, match="unterminated parameter expansion") as exc_info:
            tokenize("echo ${HOME")
        assert exc_info.value.position.column == 6

    def test_unterminated_substitution_in_string(self):
        with pytest.raises(LexError, match="command substitution"):
            tokenize('echo "$(date')

    def test_error_on_second_line(self):
        with pytest.raises(LexError) as exc_info:
            tokenize("echo ok\necho 'x")
        err = exc_info.value
        assert err.position.line == 2
        assert err.position.column == 6

    def test_quote_in_comment_is_fine(self):
        tokenize("# don't worry\n")


class TestErrorFormatting:
    def test_format_contains_line(self):
        with pytest.raises(LexError) as exc_info:
            tokenize("some text 'more text")
        formatted = exc_info.value.format()
        assert "some text 'more text" in formatted

    def test_format_contains_carets(self):
        with pytest.raises(LexError) as exc_info:
            tokenize("'")
        formatted = exc_info.value.format()
        assert "^" in formatted

    def test_format_contains_error_prefix(self):
        with pytest.raises(LexError) as exc_info:
            tokenize("'")
        formatted = exc_info.value.format()
        assert formatted.startswith("error:")

    def test_format_contains_position(self):
        with pytest.raises(LexError) as exc_info:
            tokenize("'")
        formatted = exc_info.value.format()
        assert "input.sh:1:1" in formatted

    def test_format_with_custom_filename(self):
        with pytest.raises(LexError) as exc_info:
            tokenize("'")
        formatted = exc_info.value.format("deploy.sh")
        assert "deploy.sh" in formatted

    def test_multiline_error_position(self):
        source = "line1\nline2\n'"
        with pytest.raises(LexError) as exc_info:
            tokenize(source)
        formatted = exc_info.value.format()
        assert "3:1" in formatted


class TestConfigErrorFormatting:
    def test_with_option(self):
        err = ConfigError("must not be negative, got -1", "tabs")
        assert str(err) == "error: option 'tabs': must not be negative, got -1"
        assert err.option == "tabs"

    def test_without_option(self):
        err = ConfigError("bad config")
        assert str(err) == "error: bad config"
        assert err.option is None
