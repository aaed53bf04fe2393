"""Shared test fixtures for digester tests."""

from unittest.mock import Mock

import pytest

from digester.rules import Digester, RuleRegistry, WildcardMatcher


ADDRESS_BOOK_XML = """<?xml version="1.0"?>
<address-book>
  <person id="1" category="acquaintance">
    <name>Gonzo</name>
    <email type="business">gonzo@muppets.com</email>
  </person>
  <person id="2" category="rolemodel">
    <name>Kermit</name>
    <email type="business">kermie@acme.com</email>
    <email type="home">kermie@gmail.com</email>
  </person>
</address-book>
"""


@pytest.fixture
def address_book_xml() -> str:
    """Return a small address book document."""
    return ADDRESS_BOOK_XML


@pytest.fixture
def digester() -> Digester:
    """Return a digester with an empty exact-match registry."""
    return Digester()


@pytest.fixture
def wildcard_digester() -> Digester:
    """Return a digester with an empty wildcard registry."""
    return Digester(RuleRegistry(WildcardMatcher()))


@pytest.fixture
def mock_http_response():
    """Factory fixture to create mock HTTP responses.

    Usage:
        def test_example(mock_http_response):
            response = mock_http_response(b"<xml>content</xml>")
            # response.content == b"<xml>content</xml>"
            # response.raise_for_status() does nothing
    """

    def _create_response(content: bytes) -> Mock:
        response = Mock()
        response.content = content
        response.raise_for_status = Mock()
        return response

    return _create_response
