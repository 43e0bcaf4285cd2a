"""
Parsed response documents.

Each XML or JSON body is parsed once into a small immutable tree and then read
through a couple of generic accessors, so adapters describe *which* fields they
want instead of walking parser-specific structures.

XML tag and attribute names are folded to lower case: sources are not
consistent about capitalisation (``CustomerId`` vs ``customerid``), and the
accessors are meant to be case-insensitive.
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from bs4 import BeautifulSoup, Comment, NavigableString, Tag
from bs4.element import Declaration, Doctype, ProcessingInstruction

MAX_DEPTH = 512

_NON_TEXT = (Comment, Declaration, Doctype, ProcessingInstruction)


class DocumentError(ValueError):
    """Raised when a response body cannot be parsed."""


@dataclass(frozen=True)
class XmlNode:
    tag: str
    attributes: Mapping[str, str]
    text: str
    children: Tuple["XmlNode", ...]

    def iter(self) -> Iterator["XmlNode"]:
        """Yield this node and all descendants in document order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def descendants(self, tag: str) -> Iterator["XmlNode"]:
        for node in self.iter():
            if node is not self and node.tag == tag:
                yield node

    def child_text(self, tag: str, default: str = "") -> str:
        """Text of the first direct child named ``tag``."""
        tag = tag.lower()
        for child in self.children:
            if child.tag == tag:
                return child.text or default
        return default

    def attribute(self, name: str, default: str = "") -> str:
        return self.attributes.get(name.lower(), default)


def _local_name(name: str) -> str:
    return name.rsplit(":", 1)[-1].lower()


def _convert(tag: Tag, depth: int = 0) -> XmlNode:
    if depth > MAX_DEPTH:
        raise DocumentError("XML document nested too deeply")
    children = []
    text_parts = []
    for child in tag.children:
        if isinstance(child, Tag):
            children.append(_convert(child, depth + 1))
        elif isinstance(child, NavigableString) and not isinstance(child, _NON_TEXT):
            text_parts.append(str(child))
    attributes = {}
    for key, value in tag.attrs.items():
        if isinstance(value, list):
            value = " ".join(value)
        attributes[_local_name(key)] = str(value)
    return XmlNode(
        tag=_local_name(tag.name),
        attributes=attributes,
        text="".join(text_parts).strip(),
        children=tuple(children),
    )


class XmlDocument:
    """An XML response parsed into an XmlNode tree."""

    def __init__(self, root: XmlNode):
        self.root = root

    @classmethod
    def parse(cls, body) -> "XmlDocument":
        if not body or not body.strip():
            raise DocumentError("Empty XML document")
        try:
            soup = BeautifulSoup(body, "xml")
        except Exception as e:
            raise DocumentError(f"Could not parse XML: {e}") from e
        root = soup.find(True)
        if root is None:
            raise DocumentError("XML document has no root element")
        return cls(_convert(root))

    def _select(self, path: str) -> List[XmlNode]:
        segments = [s.lower() for s in path.split("/") if s]
        if not segments:
            return []
        scope = self.root
        first = segments[0]
        if len(segments) == 1:
            return [n for n in scope.iter() if n.tag == first]
        # Scope each intermediate segment to the first element that matches it
        scope = next((n for n in scope.iter() if n.tag == first), None)
        for segment in segments[1:-1]:
            if scope is None:
                return []
            scope = next(scope.descendants(segment), None)
        if scope is None:
            return []
        return list(scope.descendants(segments[-1]))

    def find_all(self, path: str) -> List[XmlNode]:
        return self._select(path)

    def find(self, path: str) -> Optional[XmlNode]:
        found = self._select(path)
        return found[0] if found else None

    def first_value(self, path: str, default: Optional[str] = "") -> Optional[str]:
        """Text of the first element matching ``path``, or ``default``.

        An element with no text counts as absent.
        """
        node = self.find(path)
        if node is None or not node.text:
            return default
        return node.text

    def first_attribute(self, path: str, attribute: str, default: Optional[str] = "") -> Optional[str]:
        node = self.find(path)
        if node is None:
            return default
        return node.attributes.get(attribute.lower(), default)


class JsonDocument:
    """A JSON response with presence-checked key-path access."""

    def __init__(self, data: Any):
        self.data = data

    @classmethod
    def parse(cls, body) -> "JsonDocument":
        try:
            return cls(json.loads(body))
        except (TypeError, ValueError) as e:
            raise DocumentError(f"Could not parse JSON: {e}") from e

    def get(self, *path, default: Any = None) -> Any:
        current = self.data
        for key in path:
            if isinstance(current, dict):
                if key not in current:
                    return default
                current = current[key]
            elif isinstance(current, list) and isinstance(key, int):
                if not -len(current) <= key < len(current):
                    return default
                current = current[key]
            else:
                return default
        return current

    def get_str(self, *path, default: str = "") -> str:
        """Like get(), but always a string; containers and null count as absent."""
        value = self.get(*path)
        if value is None or isinstance(value, (dict, list)):
            return default
        if isinstance(value, bool):
            return "1" if value else ""
        return str(value)

    def has(self, *path) -> bool:
        sentinel = object()
        return self.get(*path, default=sentinel) is not sentinel


def json_str(data: Dict[str, Any], key: str, default: str = "") -> str:
    """Read a scalar from a plain dict element of a JSON document as a string."""
    return JsonDocument(data).get_str(key, default=default)
