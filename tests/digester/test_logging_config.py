"""Tests for the tree-style logging helpers."""

import logging

from digester.logging_config import IndentLogger, TreeIndent, get_logger
from digester.rules import BaseRule, Digester


class TestTreeIndent:
    """Tests for TreeIndent class."""

    def test_root_level_has_no_indent(self) -> None:
        """Test that level 0 has no prefix."""
        assert TreeIndent().get_indent() == ""

    def test_branch_and_pipe(self) -> None:
        """Test the prefix of nested active levels."""
        tree = TreeIndent()
        tree.increase()
        assert tree.get_indent() == "├──"
        tree.increase()
        assert tree.get_indent() == "│   ├──"

    def test_double_line(self) -> None:
        """Test the emphasised prefix."""
        tree = TreeIndent()
        tree.increase(double_line=True)
        assert tree.get_indent() == "║──"

    def test_decrease_and_reset(self) -> None:
        """Test leaving levels and resetting."""
        tree = TreeIndent()
        tree.increase()
        tree.increase()
        tree.decrease()
        assert tree.level == 1
        tree.reset()
        assert tree.level == 0
        tree.decrease()
        assert tree.level == 0


class TestIndentLogger:
    """Tests for IndentLogger class."""

    def test_messages_are_prefixed(self, caplog) -> None:
        """Test that log records carry the tree prefix."""
        logger = get_logger("digester.test")
        with caplog.at_level(logging.DEBUG, logger="digester.test"):
            logger.debug("top")
            with logger.indent_block("block"):
                logger.info("inside")

        assert [r.getMessage() for r in caplog.records] == ["top", "block", "├──inside"]

    def test_each_logger_has_own_tree(self) -> None:
        """Test that indentation state is not shared between loggers."""
        first = get_logger()
        second = get_logger()
        first.tree.increase()

        assert second.tree.level == 0
        assert isinstance(first, IndentLogger)

    def test_engine_logs_elements(self, caplog) -> None:
        """Test that the engine logs each element at debug level."""
        digester = Digester()
        digester.add_rule("a/b", BaseRule())

        with caplog.at_level(logging.DEBUG, logger="digester"):
            digester.parse_string("<a><b/></a>")

        messages = [r.getMessage() for r in caplog.records]
        assert "<a> match='a' rules=0" in messages
        assert "├──<b> match='a/b' rules=1" in messages
        assert digester.log.tree.level == 0
