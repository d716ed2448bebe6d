"""Turn page documents into page records ready for composition.

A page's root names the template it fills (``oeuvre-template``) and may move
its output with ``oeuvre-path``. Each direct child of the root that carries an
``oeuvre-slot`` attribute supplies content for one or more named slots.

Example
-------
>>> from pathlib import Path
>>> from oeuvre.markup import parse_string
>>> from oeuvre.pages import build_page
>>> root = parse_string(
...     '<page oeuvre-template="base"><h1 oeuvre-slot="title, heading">Hi</h1></page>'
... )
>>> page = build_page(root, Path("blog/post.xml"))
>>> page.template, sorted(page.slots), page.output_path.as_posix()
('base', ['heading', 'title'], 'blog/post.xml')
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import logging
import posixpath
from pathlib import Path

from ._constants import PATH_ATTR, SLOT_ATTR, TEMPLATE_ATTR
from .markup import Element, MarkupError, parse_file

logger = logging.getLogger(__name__)


class PageError(ValueError):
    """Raised when a page document cannot be turned into a page record."""


@dc.dataclass(frozen=True, slots=True)
class Page:
    """A page: its target template and the slot values it supplies.

    Attributes
    ----------
    source : Path
        Root-relative path of the page document.
    output_path : Path
        Path of the rendered document, relative to the output directory.
    template : str
        Name of the template the page fills.
    slots : dict[str, Element]
        Slot name to the element supplied for it.
    """

    source: Path
    output_path: Path
    template: str
    slots: dict[str, Element] = dc.field(default_factory=dict)


def _resolve_output_path(source: Path, override: str | None) -> Path:
    """Return where the page renders, honouring an ``oeuvre-path`` override."""
    if override is None:
        return source
    if override.startswith("/"):
        candidate = override.lstrip("/")
    else:
        candidate = posixpath.join(source.parent.as_posix(), override)
    normalized = posixpath.normpath(candidate) if candidate else "."
    if normalized == "." or normalized == ".." or normalized.startswith("../"):
        msg = (
            f"Page {source} has the {PATH_ATTR} value {override!r}, "
            "which does not name a file inside the output directory"
        )
        raise PageError(msg)
    return Path(normalized)


def _collect_slots(element: Element, source: Path) -> dict[str, Element]:
    """Map slot names to the root's direct children that declare them."""
    slots: dict[str, Element] = {}
    for child in element.elements():
        declared = child.attr(SLOT_ATTR)
        if declared is None:
            continue
        for raw_name in declared.split(","):
            slot_name = raw_name.strip()
            if not slot_name:
                logger.warning(
                    "Page %s has an empty slot name in %s=%r", source, SLOT_ATTR, declared
                )
                continue
            slots[slot_name] = child
    return slots


def build_page(element: Element, source: Path) -> Page:
    """Build a :class:`Page` from a parsed page root.

    Raises
    ------
    PageError
        If the root lacks ``oeuvre-template`` or its ``oeuvre-path`` escapes
        the output directory.
    """
    template = element.attr(TEMPLATE_ATTR)
    if template is None:
        msg = f"Page requires a root element with an {TEMPLATE_ATTR} attribute"
        raise PageError(msg)
    return Page(
        source=source,
        output_path=_resolve_output_path(source, element.attr(PATH_ATTR)),
        template=template,
        slots=_collect_slots(element, source),
    )


def load_page(path: Path, *, root: Path | None = None) -> Page:
    """Parse the page document at ``path`` (relative to ``root``)."""
    element = parse_file(path if root is None else root / path)
    return build_page(element, path)


def load_pages(
    paths: cabc.Iterable[Path], *, root: Path | None = None
) -> dict[Path, Page]:
    """Load pages in ``paths`` order, keyed by output path.

    Pages that fail to load are logged and skipped. When two pages resolve to
    the same output path the first one keeps it.
    """
    pages: dict[Path, Page] = {}
    for path in paths:
        logger.info("Loading page %s", path)
        try:
            page = load_page(path, root=root)
        except (MarkupError, PageError) as exc:
            logger.error("Skipping %s: %s", path, exc)
            continue
        existing = pages.get(page.output_path)
        if existing is not None:
            logger.error(
                "Skipping %s: output path %s is already used by page %s",
                path,
                page.output_path,
                existing.source,
            )
            continue
        logger.info("Loaded page %s", path)
        pages[page.output_path] = page
    return pages


__all__ = ["Page", "PageError", "build_page", "load_page", "load_pages"]
