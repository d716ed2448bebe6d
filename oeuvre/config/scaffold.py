"""Write a commented default ``site.toml`` for new sites."""

from __future__ import annotations

from pathlib import Path

import tomlkit

from .models import (
    DEFAULT_ASSETS,
    DEFAULT_DATA,
    DEFAULT_DIR,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_PAGES,
    DEFAULT_SNIPPETS,
    DEFAULT_TEMPLATES,
)

_CATEGORY_COMMENTS = (
    ("exclude", (), "Files never processed, matched first."),
    ("templates", DEFAULT_TEMPLATES, "Documents whose root declares oeuvre-name."),
    ("snippets", DEFAULT_SNIPPETS, "Reusable fragments for oeuvre-include."),
    ("data", DEFAULT_DATA, "Reserved for structured data; never rendered."),
    ("pages", DEFAULT_PAGES, "Documents whose root declares oeuvre-template."),
    ("assets", DEFAULT_ASSETS, "Copied to the output directory unchanged."),
)


def render_default_config() -> str:
    """Return the text of a default ``site.toml``."""
    document = tomlkit.document()
    document.add(tomlkit.comment("oeuvre site configuration."))
    document.add(
        tomlkit.comment("Patterns are matched relative to `dir`, in the order below;")
    )
    document.add(tomlkit.comment("a file claimed by one category is skipped by later ones."))
    document.add(tomlkit.nl())
    document.add("dir", DEFAULT_DIR)
    document.add("output_dir", DEFAULT_OUTPUT_DIR)
    for key, patterns, comment in _CATEGORY_COMMENTS:
        document.add(tomlkit.nl())
        document.add(tomlkit.comment(comment))
        document.add(key, list(patterns))
    return tomlkit.dumps(document)


def write_default_config(path: Path, *, force: bool = False) -> Path:
    """Write the default configuration to ``path``.

    Raises
    ------
    FileExistsError
        If ``path`` already exists and ``force`` is false.
    """
    if path.exists() and not force:
        msg = f"{path} already exists; pass force=True to overwrite it."
        raise FileExistsError(msg)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_default_config(), encoding="utf-8")
    return path


__all__ = ["render_default_config", "write_default_config"]
