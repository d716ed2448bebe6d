"""Compose page content and snippets into a template tree.

The engine walks a template and rebuilds it as a new tree. Ordinary elements
are copied with their reserved ``oeuvre-*`` attributes removed. Three reserved
elements are rewritten instead of copied:

``oeuvre-include``
    Replaced by the children of the snippet named in ``oeuvre-snippet``, or by
    its own children when no such snippet exists.
``oeuvre-slot``
    Replaced by the page's value for the slot named in ``oeuvre-name``, or by
    its own children when the page supplies no value.
``oeuvre-fragment``
    Only meaningful as a slot value: its children are substituted without the
    wrapper, so several siblings can fill one slot.

Substituting a wrapper's children in place of the wrapper ("unwrapping") is
shared by include resolution, both fallbacks, and fragment slot values.

Nothing here is fatal. A marker without its required attribute, an unknown
marker, a snippet or slot that would expand inside itself, and markup nested
more than ``MAX_DEPTH`` levels below the template root are logged and render
as nothing while the rest of the tree is still produced.

Example
-------
>>> from oeuvre.markup import parse_string, serialize
>>> from oeuvre.render import render
>>> template = parse_string(
...     '<div oeuvre-name="t"><oeuvre-slot oeuvre-name="x">fallback</oeuvre-slot></div>'
... )
>>> serialize(render(template, {}, {}))
'<div>fallback</div>'
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import enum
import logging
import typing as typ

from ._constants import (
    FRAGMENT_ELEMENT,
    INCLUDE_ELEMENT,
    NAME_ATTR,
    RESERVED_PREFIX,
    SLOT_ELEMENT,
    SNIPPET_ATTR,
)
from .markup import Element, Node

if typ.TYPE_CHECKING:
    from .library import Snippet

logger = logging.getLogger(__name__)

# Deepest nesting of elements and markers rendered below a template root.
MAX_DEPTH = 150


class Marker(enum.Enum):
    """Reserved elements the engine recognizes by local name."""

    INCLUDE = INCLUDE_ELEMENT
    SLOT = SLOT_ELEMENT
    FRAGMENT = FRAGMENT_ELEMENT
    UNKNOWN = RESERVED_PREFIX

    @classmethod
    def classify(cls, element: Element) -> Marker | None:
        """Return the marker ``element`` represents, or ``None`` if ordinary."""
        if not element.name.startswith(RESERVED_PREFIX):
            return None
        try:
            return cls(element.name)
        except ValueError:
            return cls.UNKNOWN


@dc.dataclass(frozen=True, slots=True)
class _Context:
    """Lookup tables for one render plus the expansions currently open."""

    slots: cabc.Mapping[str, Element]
    snippets: cabc.Mapping[str, Snippet]
    active: frozenset[tuple[Marker, str]] = frozenset()
    depth: int = 0

    def entering(self, marker: Marker, name: str) -> _Context:
        return dc.replace(self, active=self.active | {(marker, name)})

    def deeper(self) -> _Context:
        return dc.replace(self, depth=self.depth + 1)


def render(
    template_root: Element,
    slots: cabc.Mapping[str, Element],
    snippets: cabc.Mapping[str, Snippet],
) -> Element:
    """Return a new tree with slots and includes in ``template_root`` resolved.

    Parameters
    ----------
    template_root : Element
        Root element of the template being filled.
    slots : Mapping[str, Element]
        Page-supplied slot values keyed by slot name.
    snippets : Mapping[str, Snippet]
        Snippet library keyed by snippet name.

    Returns
    -------
    Element
        Freshly built output tree. None of the inputs are modified.
    """
    return _render_element(template_root, _Context(slots, snippets))


def _public_attributes(element: Element) -> dict[str, str]:
    return {
        key: value
        for key, value in element.attributes.items()
        if not key.startswith(RESERVED_PREFIX)
    }


def _render_element(element: Element, ctx: _Context) -> Element:
    children: list[Node] = []
    _render_children(element, children, ctx)
    return Element(
        name=element.name,
        namespace=element.namespace,
        attributes=_public_attributes(element),
        children=tuple(children),
    )


def _render_children(source: Element, target: list[Node], ctx: _Context) -> None:
    for child in source.children:
        if isinstance(child, Element):
            _render_child(child, target, ctx)
        else:
            target.append(child)


def _unwrap(wrapper: Element, target: list[Node], ctx: _Context) -> None:
    """Render the children of ``wrapper`` into ``target``, dropping the wrapper."""
    _render_children(wrapper, target, ctx)


def _render_child(element: Element, target: list[Node], ctx: _Context) -> None:
    if ctx.depth >= MAX_DEPTH:
        logger.error(
            "<%s> is nested more than %d levels below the template root; it renders nothing.",
            element.name,
            MAX_DEPTH,
        )
        return
    ctx = ctx.deeper()
    match Marker.classify(element):
        case None:
            target.append(_render_element(element, ctx))
        case Marker.INCLUDE:
            _render_include(element, target, ctx)
        case Marker.SLOT:
            _render_slot(element, target, ctx)
        case Marker.FRAGMENT:
            logger.error(
                "Found an %s element outside a slot value; it renders nothing.",
                FRAGMENT_ELEMENT,
            )
        case Marker.UNKNOWN:
            logger.error("Unknown oeuvre element found: %s", element.name)


def _render_include(element: Element, target: list[Node], ctx: _Context) -> None:
    snippet_name = element.attr(SNIPPET_ATTR)
    if snippet_name is None:
        logger.error(
            "Found an %s element without a target %s attribute.",
            INCLUDE_ELEMENT,
            SNIPPET_ATTR,
        )
        return

    snippet = ctx.snippets.get(snippet_name)
    if snippet is None:
        logger.debug("Snippet %s not found; rendering fallback content", snippet_name)
        _unwrap(element, target, ctx)
        return

    if (Marker.INCLUDE, snippet_name) in ctx.active:
        logger.error(
            "Snippet %s includes itself; the nested include renders nothing.",
            snippet_name,
        )
        return
    _unwrap(snippet.element, target, ctx.entering(Marker.INCLUDE, snippet_name))


def _render_slot(element: Element, target: list[Node], ctx: _Context) -> None:
    slot_name = element.attr(NAME_ATTR)
    if slot_name is None:
        logger.error(
            "Found an %s element without an identifying %s attribute.",
            SLOT_ELEMENT,
            NAME_ATTR,
        )
        return

    value = ctx.slots.get(slot_name)
    if value is None:
        _unwrap(element, target, ctx)
        return

    if (Marker.SLOT, slot_name) in ctx.active:
        logger.error(
            "Slot %s is used inside its own value; the nested slot renders nothing.",
            slot_name,
        )
        return
    inner = ctx.entering(Marker.SLOT, slot_name)
    if Marker.classify(value) is Marker.FRAGMENT:
        _unwrap(value, target, inner)
    else:
        _render_child(value, target, inner)


__all__ = ["MAX_DEPTH", "Marker", "render"]
