"""Ordered, attributed markup trees used for templates, snippets, and pages.

Source documents are parsed with lxml and converted into small frozen
dataclasses so the composition engine can treat them as values: rendering
always builds a fresh tree and never mutates what the loaders produced. The
same model is converted back into lxml nodes for serialization.

Example
-------
>>> from oeuvre.markup import parse_string, serialize
>>> root = parse_string("<div class='a'>hi <!-- note --><b>there</b></div>")
>>> root.name, root.attributes
('div', {'class': 'a'})
>>> serialize(root)
'<div class="a">hi <!-- note --><b>there</b></div>'
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import logging
import typing as typ

from lxml import etree

if typ.TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)


class MarkupError(ValueError):
    """Raised when a document cannot be read or parsed into a tree."""


@dc.dataclass(frozen=True, slots=True)
class Text:
    """Character data, copied verbatim into rendered output."""

    value: str


@dc.dataclass(frozen=True, slots=True)
class Comment:
    """A markup comment, copied verbatim into rendered output."""

    value: str


@dc.dataclass(frozen=True, slots=True)
class ProcessingInstruction:
    """A processing instruction, copied verbatim into rendered output."""

    target: str
    value: str = ""


@dc.dataclass(frozen=True, slots=True)
class Element:
    """A tagged element with ordered attributes and ordered children.

    Attributes
    ----------
    name : str
        Local tag name, without any namespace.
    namespace : str or None
        Namespace URI the element belongs to, if any.
    attributes : dict[str, str]
        Attribute values in document order. Namespaced attribute names use
        Clark notation (``{uri}local``).
    children : tuple[Node, ...]
        Text, comment, processing instruction, and element children in
        document order.
    """

    name: str
    namespace: str | None = None
    attributes: dict[str, str] = dc.field(default_factory=dict)
    children: tuple[Node, ...] = ()

    def attr(self, name: str) -> str | None:
        """Return the value of attribute ``name`` or ``None`` when absent."""
        return self.attributes.get(name)

    def elements(self) -> cabc.Iterator[Element]:
        """Yield the element children, skipping text and comments."""
        for child in self.children:
            if isinstance(child, Element):
                yield child

    def iter(self) -> cabc.Iterator[Element]:
        """Yield this element and every descendant element, depth first."""
        yield self
        for child in self.elements():
            yield from child.iter()


Node = Text | Comment | ProcessingInstruction | Element


def parse_file(path: Path) -> Element:
    """Read ``path`` and parse it into an :class:`Element` tree.

    Raises
    ------
    MarkupError
        If the file cannot be read or is not well-formed XML.
    """
    try:
        data = path.read_bytes()
    except OSError as exc:
        msg = f"{path} could not be opened. Cause: {exc}"
        raise MarkupError(msg) from exc
    return parse_string(data, source=str(path))


def parse_string(text: str | bytes, *, source: str = "<string>") -> Element:
    """Parse markup ``text`` into an :class:`Element` tree.

    Entities declared in the document's internal subset are expanded; external
    entities are never loaded and no network access is attempted. Comments,
    processing instructions, and whitespace are preserved.
    """
    if isinstance(text, str):
        text = text.encode("utf-8")
    parser = etree.XMLParser(resolve_entities="internal", no_network=True)
    try:
        root = etree.fromstring(text, parser)
    except etree.XMLSyntaxError as exc:
        msg = f"{source} could not be parsed as xml. Cause: {exc}"
        raise MarkupError(msg) from exc
    return _from_lxml(root)


def _from_lxml(node: etree._Element) -> Element:
    """Convert an lxml element into the immutable tree model."""
    qname = etree.QName(node)
    children: list[Node] = []
    if node.text:
        children.append(Text(node.text))
    for child in node:
        if child.tag is etree.Comment:
            children.append(Comment(child.text or ""))
        elif child.tag is etree.PI:
            children.append(ProcessingInstruction(child.target, child.text or ""))
        elif isinstance(child.tag, str):
            children.append(_from_lxml(child))
        else:
            logger.error(
                "Dropping unresolved entity reference %s in <%s>; external entities "
                "are not loaded",
                child,
                qname.localname,
            )
        if child.tail:
            children.append(Text(child.tail))
    return Element(
        name=qname.localname,
        namespace=qname.namespace,
        attributes=dict(node.attrib),
        children=tuple(children),
    )


def _tag(element: Element) -> str:
    if element.namespace is None:
        return element.name
    return f"{{{element.namespace}}}{element.name}"


def _nsmap(element: Element, parent_namespace: str | None) -> dict[None, str] | None:
    if element.namespace and element.namespace != parent_namespace:
        return {None: element.namespace}
    return None


def _fill(node: etree._Element, element: Element) -> None:
    """Copy the attributes and children of ``element`` onto ``node``."""
    for key, value in element.attributes.items():
        node.set(key, value)

    last: etree._Element | None = None
    for child in element.children:
        match child:
            case Text(value):
                if last is None:
                    node.text = (node.text or "") + value
                else:
                    last.tail = (last.tail or "") + value
            case Comment(value):
                last = etree.Comment(value)
                node.append(last)
            case ProcessingInstruction(target, value):
                last = etree.ProcessingInstruction(target, value or None)
                node.append(last)
            case Element():
                # SubElement reuses namespace declarations already in scope.
                last = etree.SubElement(
                    node, _tag(child), nsmap=_nsmap(child, element.namespace)
                )
                _fill(last, child)


def to_lxml(element: Element) -> etree._Element:
    """Convert ``element`` into a new lxml element tree.

    A default namespace declaration is emitted wherever an element's namespace
    differs from its parent's. Elements without a namespace never get an
    ``xmlns=""`` undeclaration: under a namespaced parent they serialize as
    plain tags and read back in the parent's namespace. Page content without a
    namespace that fills an XHTML template therefore comes out as XHTML.
    """
    node = etree.Element(_tag(element), nsmap=_nsmap(element, None))
    _fill(node, element)
    return node


def serialize(element: Element) -> str:
    """Serialize ``element`` to XML text without a declaration."""
    return etree.tostring(to_lxml(element), encoding="unicode")


__all__ = [
    "Comment",
    "Element",
    "MarkupError",
    "Node",
    "ProcessingInstruction",
    "Text",
    "parse_file",
    "parse_string",
    "serialize",
    "to_lxml",
]
