"""Compose static pages from reusable templates and snippets.

oeuvre reads XML page documents, fills the slots of the template each page
names, resolves snippet includes, and writes the finished documents to an
output directory alongside the site's assets.

Exports
-------
- ``app``: Cyclopts application entry for subcommands.
- ``main``: Convenience function that invokes the Cyclopts app.

Examples
--------
>>> from oeuvre import main
>>> main()  # doctest: +SKIP
>>> from oeuvre import app
>>> app(["build", "--strict"])  # doctest: +SKIP
"""

from __future__ import annotations

from .cli import app, main

__all__ = ["app", "main"]
