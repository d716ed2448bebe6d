"""Load named templates and snippets into name-keyed collections.

Templates and snippets are documents whose root element carries an
``oeuvre-name`` attribute. Each kind lives in its own namespace, so a template
and a snippet may share a name. Within one collection the first file to
declare a name wins; later declarations are reported and skipped.

Example
-------
>>> from pathlib import Path
>>> from oeuvre.library import load_templates
>>> templates = load_templates([Path("templates/base.xml")], root=Path("site"))  # doctest: +SKIP
>>> sorted(templates)  # doctest: +SKIP
['base']
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import logging
import typing as typ
from pathlib import Path

from ._constants import NAME_ATTR
from .markup import Element, MarkupError, parse_file

logger = logging.getLogger(__name__)


class LibraryError(ValueError):
    """Raised when a template or snippet file cannot join its collection."""


@dc.dataclass(frozen=True, slots=True)
class Template:
    """A named document root into which page content is composed."""

    name: str
    element: Element
    source: Path | None = None


@dc.dataclass(frozen=True, slots=True)
class Snippet:
    """A named fragment that templates and pages can include."""

    name: str
    element: Element
    source: Path | None = None


_Entry = typ.TypeVar("_Entry", Template, Snippet)


def _resolve(path: Path, root: Path | None) -> Path:
    return path if root is None else root / path


def _require_unique_name(
    element: Element, kind: str, existing: cabc.Container[str]
) -> str:
    """Return the root's declared name, rejecting absent or taken names."""
    name = element.attr(NAME_ATTR)
    if name is None or not name.strip():
        msg = f"{kind.capitalize()} requires a root element with an {NAME_ATTR} attribute"
        raise LibraryError(msg)
    if name in existing:
        msg = (
            f"{kind.capitalize()} has the {NAME_ATTR} attribute value {name}, "
            f"which is already in use by another {kind}"
        )
        raise LibraryError(msg)
    return name


def load_template(
    path: Path, templates: cabc.Container[str], *, root: Path | None = None
) -> Template:
    """Parse the template at ``path``.

    Raises
    ------
    MarkupError
        If the file cannot be read or parsed.
    LibraryError
        If the root has no ``oeuvre-name`` or the name is already in
        ``templates``.
    """
    element = parse_file(_resolve(path, root))
    name = _require_unique_name(element, "template", templates)
    return Template(name=name, element=element, source=path)


def load_snippet(
    path: Path, snippets: cabc.Container[str], *, root: Path | None = None
) -> Snippet:
    """Parse the snippet at ``path``; raises like :func:`load_template`."""
    element = parse_file(_resolve(path, root))
    name = _require_unique_name(element, "snippet", snippets)
    return Snippet(name=name, element=element, source=path)


def _load_many(
    paths: cabc.Iterable[Path],
    loader: cabc.Callable[..., _Entry],
    kind: str,
    root: Path | None,
) -> dict[str, _Entry]:
    entries: dict[str, _Entry] = {}
    for path in paths:
        logger.info("Reading %s %s", kind, path)
        try:
            entry = loader(path, entries, root=root)
        except (MarkupError, LibraryError) as exc:
            logger.error("Skipping %s: %s", path, exc)
            continue
        logger.info("Loaded %s %s from %s", kind, entry.name, path)
        entries[entry.name] = entry
    return entries


def load_templates(
    paths: cabc.Iterable[Path], *, root: Path | None = None
) -> dict[str, Template]:
    """Load every template in ``paths`` order, skipping files that fail."""
    return _load_many(paths, load_template, "template", root)


def load_snippets(
    paths: cabc.Iterable[Path], *, root: Path | None = None
) -> dict[str, Snippet]:
    """Load every snippet in ``paths`` order, skipping files that fail."""
    return _load_many(paths, load_snippet, "snippet", root)


__all__ = [
    "LibraryError",
    "Snippet",
    "Template",
    "load_snippet",
    "load_snippets",
    "load_template",
    "load_templates",
]
