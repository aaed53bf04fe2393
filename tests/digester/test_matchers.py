"""Tests for pattern matchers."""

import pytest

from digester.rules import ExactMatcher, RegexMatcher, WildcardMatcher
from digester.rules.matchers import compile_wildcard


class TestExactMatcher:
    """Tests for ExactMatcher."""

    def test_equal_path_matches(self) -> None:
        """Test that identical path and pattern match."""
        assert ExactMatcher().matches("a/b/c", "a/b/c")

    def test_suffix_does_not_match(self) -> None:
        """Test that a suffix of the path is not enough."""
        assert not ExactMatcher().matches("a/b/c", "b/c")

    def test_wildcards_are_literal(self) -> None:
        """Test that wildcard characters have no special meaning."""
        assert not ExactMatcher().matches("a/b", "*/b")


class TestWildcardMatcher:
    """Tests for WildcardMatcher."""

    @pytest.mark.parametrize(
        "path",
        ["beta/gamma", "alpha/beta/gamma", "x/y/beta/gamma"],
    )
    def test_leading_star_matches_any_prefix(self, path: str) -> None:
        """Test that */beta/gamma matches with zero or more leading segments."""
        assert WildcardMatcher().matches(path, "*/beta/gamma")

    @pytest.mark.parametrize(
        "path",
        ["alpha/beta", "beta/gamma/delta", "xbeta/gamma"],
    )
    def test_leading_star_requires_whole_suffix(self, path: str) -> None:
        """Test paths that */beta/gamma must not match."""
        assert not WildcardMatcher().matches(path, "*/beta/gamma")

    def test_star_alone_matches_everything(self) -> None:
        """Test that * matches any path."""
        matcher = WildcardMatcher()
        assert matcher.matches("a", "*")
        assert matcher.matches("a/b/c", "*")

    def test_trailing_star_matches_descendants(self) -> None:
        """Test that a/* matches every descendant of a."""
        matcher = WildcardMatcher()
        assert matcher.matches("a/b", "a/*")
        assert matcher.matches("a/b/c", "a/*")
        assert not matcher.matches("a", "a/*")

    def test_question_mark_matches_one_character(self) -> None:
        """Test that ? matches a single character within a segment."""
        matcher = WildcardMatcher()
        assert matcher.matches("a/bc", "a/b?")
        assert not matcher.matches("a/b", "a/b?")
        assert not matcher.matches("a/bcd", "a/b?")

    def test_question_mark_never_matches_slash(self) -> None:
        """Test that ? does not cross segment boundaries."""
        assert not WildcardMatcher().matches("a/b", "a?b")

    def test_plain_pattern_is_exact(self) -> None:
        """Test that patterns without wildcards need an exact match."""
        matcher = WildcardMatcher()
        assert matcher.matches("a/b", "a/b")
        assert not matcher.matches("x/a/b", "a/b")

    def test_regex_characters_are_escaped(self) -> None:
        """Test that dots and other regex characters are literal."""
        matcher = WildcardMatcher()
        assert matcher.matches("li.nr", "*/li.nr")
        assert not matcher.matches("lixnr", "*/li.nr")

    def test_matcher_keeps_no_per_instance_cache(self) -> None:
        """Test that matching leaves the matcher's state untouched."""
        matcher = WildcardMatcher()
        before = dict(vars(matcher))

        matcher.matches("a/b/c", "*/c")

        assert vars(matcher) == before
        assert compile_wildcard("*/c") is compile_wildcard("*/c")


class TestRegexMatcher:
    """Tests for RegexMatcher."""

    def test_alternation(self) -> None:
        """Test that a pattern is a regular expression over the path."""
        matcher = RegexMatcher()
        assert matcher.matches("book/title", "book/(title|isbn)")
        assert matcher.matches("book/isbn", "book/(title|isbn)")
        assert not matcher.matches("book/author", "book/(title|isbn)")

    def test_whole_path_must_match(self) -> None:
        """Test that the expression is anchored at both ends."""
        matcher = RegexMatcher()
        assert matcher.matches("a/chapter/12", r".*/chapter/\d+")
        assert not matcher.matches("a/chapter/12/note", r".*/chapter/\d+")
        assert not matcher.matches("x/book", "book")

    def test_validate_rejects_bad_expression(self) -> None:
        """Test that an expression that does not compile is rejected."""
        with pytest.raises(ValueError, match="Invalid regular expression"):
            RegexMatcher().validate("a/(b")
