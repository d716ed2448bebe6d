"""Shared fixtures that lay out small oeuvre sites on disk."""

from __future__ import annotations

import typing as typ
from textwrap import dedent

import pytest

if typ.TYPE_CHECKING:
    from pathlib import Path

SAMPLE_SITE: dict[str, str] = {
    "site.toml": dedent(
        """
        exclude = ["drafts/**"]
        """
    ),
    "templates/base.xml": dedent(
        """\
        <html oeuvre-name="base" lang="en">
        <head><title><oeuvre-slot oeuvre-name="title">Untitled</oeuvre-slot></title></head>
        <body>
        <oeuvre-include oeuvre-snippet="nav"><p class="no-nav">no nav</p></oeuvre-include>
        <main><oeuvre-slot oeuvre-name="body"><p>Nothing here yet.</p></oeuvre-slot></main>
        <oeuvre-include oeuvre-snippet="footer"><footer>default footer</footer></oeuvre-include>
        </body>
        </html>
        """
    ),
    "snippets/nav.xml": dedent(
        """\
        <nav oeuvre-name="nav"><a href="/index.xml">Home</a><a href="/blog/post.xml">Blog</a></nav>
        """
    ),
    "index.xml": dedent(
        """\
        <page oeuvre-template="base">
          <span oeuvre-slot="title">Home</span>
          <oeuvre-fragment oeuvre-slot="body"><h1>Welcome</h1><p>Hello.</p></oeuvre-fragment>
        </page>
        """
    ),
    "blog/post.xml": dedent(
        """\
        <page oeuvre-template="base" oeuvre-path="first-post.html">
          <article oeuvre-slot="body" class="post"><h1>First post</h1></article>
        </page>
        """
    ),
    "blog/orphan.xml": '<page oeuvre-template="missing"/>\n',
    "drafts/wip.xml": '<page oeuvre-template="base"/>\n',
    "data/people.xml": '<people oeuvre-name="people"/>\n',
    "assets/site.css": "body { margin: 0; }\n",
    "output/stale.xml": '<page oeuvre-template="base"/>\n',
}


def write_site(root: Path, files: typ.Mapping[str, str]) -> Path:
    """Write ``files`` under ``root`` and return the path of ``site.toml``."""
    for name, text in files.items():
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    return root / "site.toml"


@pytest.fixture
def sample_site(tmp_path: Path) -> Path:
    """Lay out the sample site and return its configuration file."""
    return write_site(tmp_path, SAMPLE_SITE)
