"""Event sources that drive a content handler from XML input.

The digester only needs start/characters/end callbacks; this module turns
files, byte strings and URLs into those callbacks using lxml's iterparse.
"""

from __future__ import annotations

import io
import os
from contextlib import nullcontext
from dataclasses import dataclass
from typing import IO, Any, Protocol

import requests
from lxml import etree

from digester.config import HTTP_TIMEOUT
from digester.rules.protocols import Attribute, Attributes


def split_tag(tag: Any) -> tuple[str | None, str]:
    """Split an lxml tag into namespace and local name.

    Args:
        tag: lxml tag such as "{urn:x}item" or "item"

    Returns:
        Tuple of (namespace or None, local name)
    """
    if isinstance(tag, str) and tag.startswith("{") and "}" in tag:
        namespace, _, local = tag[1:].partition("}")
        return namespace, local
    return None, tag if isinstance(tag, str) else ""


def attributes_of(elem: etree._Element) -> Attributes:
    """Build an Attributes list from an element's attributes."""
    prefixes = {uri: prefix for prefix, uri in elem.nsmap.items() if prefix}
    attrs: list[Attribute] = []
    for key, value in elem.attrib.items():
        namespace, local = split_tag(key)
        qname = local
        if namespace is not None and namespace in prefixes:
            qname = f"{prefixes[namespace]}:{local}"
        attrs.append(
            Attribute(local_name=local, value=value, namespace_uri=namespace, qname=qname)
        )
    return Attributes(attrs)


def own_text(elem: etree._Element) -> str:
    """Character data directly inside an element, excluding its children's content."""
    parts: list[str] = []
    if elem.text:
        parts.append(elem.text)
    for child in elem:
        if child.tail:
            parts.append(child.tail)
    return "".join(parts)


@dataclass
class Locator:
    """Position of the event currently being delivered."""

    line: int | None = None
    column: int | None = None


class ContentHandler(Protocol):
    """Receiver of SAX-style events."""

    def set_locator(self, locator: Locator) -> None:
        ...

    def start_document(self) -> None:
        ...

    def start_element(
        self, namespace: str | None, name: str, attributes: Attributes
    ) -> None:
        ...

    def characters(self, text: str) -> None:
        ...

    def end_element(self, namespace: str | None, name: str) -> None:
        ...

    def end_document(self) -> Any:
        ...


class EventSource(Protocol):
    """Protocol for anything that can deliver a document as events."""

    def drive(self, handler: ContentHandler) -> Any:
        """Deliver the whole document to the handler.

        Returns:
            Whatever ``handler.end_document()`` returns
        """
        ...


class LxmlEventSource:
    """Event source backed by ``lxml.etree.iterparse``.

    Accepts a path, raw bytes or a binary file object. Files opened here are
    closed on every exit path; file objects handed in stay open.
    Entity resolution and network access are disabled.
    """

    def __init__(self, source: str | os.PathLike | bytes | IO[bytes]) -> None:
        self.source = source

    @classmethod
    def from_string(cls, text: str | bytes) -> LxmlEventSource:
        """Create a source from an in-memory document."""
        if isinstance(text, str):
            text = text.encode("utf-8")
        return cls(bytes(text))

    @classmethod
    def from_url(cls, url: str, timeout: int = HTTP_TIMEOUT) -> LxmlEventSource:
        """Download a document and create a source from its content.

        Args:
            url: Location of the document
            timeout: HTTP timeout in seconds

        Returns:
            An event source over the downloaded bytes

        Raises:
            requests.HTTPError: If the download fails
        """
        response = requests.get(url, timeout=timeout)
        try:
            response.raise_for_status()
        except requests.HTTPError as e:
            raise requests.HTTPError(f"Failed to download {url}: {e}") from e
        return cls(response.content)

    def _open(self):
        source = self.source
        if isinstance(source, (bytes, bytearray)):
            return io.BytesIO(source)
        if isinstance(source, (str, os.PathLike)):
            return open(source, "rb")
        if hasattr(source, "read"):
            return nullcontext(source)
        raise TypeError(f"Unsupported XML source: {type(source).__name__}")

    def drive(self, handler: ContentHandler) -> Any:
        locator = Locator()
        handler.set_locator(locator)

        with self._open() as stream:
            handler.start_document()
            events = etree.iterparse(
                stream,
                events=("start", "end"),
                resolve_entities=False,
                no_network=True,
                load_dtd=False,
                remove_comments=True,
                remove_pis=True,
            )
            for event, elem in events:
                locator.line = elem.sourceline
                namespace, name = split_tag(elem.tag)
                if event == "start":
                    handler.start_element(namespace, name, attributes_of(elem))
                    continue

                text = own_text(elem)
                if text:
                    handler.characters(text)
                handler.end_element(namespace, name)
                # Children's tails are still needed by the parent's end event
                elem.clear(keep_tail=True)

            return handler.end_document()


def as_event_source(source: Any) -> EventSource:
    """Wrap a parse input in an event source unless it already is one."""
    # pathlib paths carry a ``drive`` string, so check inputs first
    if not isinstance(source, (str, os.PathLike, bytes, bytearray)) and callable(
        getattr(source, "drive", None)
    ):
        return source
    return LxmlEventSource(source)
