"""Build a whole site: discover files, compose pages, and write the output.

:class:`SiteBuilder` drives one run from a :class:`~oeuvre.config.SiteConfig`.
It partitions the files under the root directory into categories (excludes,
the output directory's own contents, templates, snippets, data, pages, and
assets), loads the template and snippet libraries, copies assets, and renders
every page into the output directory.

Only problems with the site layout itself are fatal: a missing root directory
or an output directory that cannot be created raise :class:`SiteBuildError`.
Every per-file problem is logged, counted in the :class:`BuildReport`, and
skipped.

Example
-------
>>> from pathlib import Path
>>> from oeuvre.config import load_site_config
>>> from oeuvre.site import SiteBuilder
>>> config = load_site_config(Path("site.toml"))  # doctest: +SKIP
>>> report = SiteBuilder(config).run()  # doctest: +SKIP
>>> report.failures  # doctest: +SKIP
0
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import logging
import shutil
import typing as typ
from pathlib import Path

from ._constants import DOCTYPE_HEADER
from .library import Snippet, Template, load_snippets, load_templates
from .markup import serialize
from .pages import Page, PageError, load_pages
from .partition import ClaimedPaths, partition
from .render import render

if typ.TYPE_CHECKING:
    from .config import SiteConfig

logger = logging.getLogger(__name__)


class SiteBuildError(RuntimeError):
    """Raised when the site layout prevents a build from starting."""


@dc.dataclass(slots=True)
class SitePaths:
    """Root-relative files assigned to each category, in claim order."""

    excluded: list[Path] = dc.field(default_factory=list)
    output: list[Path] = dc.field(default_factory=list)
    templates: list[Path] = dc.field(default_factory=list)
    snippets: list[Path] = dc.field(default_factory=list)
    data: list[Path] = dc.field(default_factory=list)
    pages: list[Path] = dc.field(default_factory=list)
    assets: list[Path] = dc.field(default_factory=list)


@dc.dataclass(slots=True)
class BuildReport:
    """Outcome of a build.

    Attributes
    ----------
    pages : list[Path]
        Rendered documents written to the output directory.
    assets : list[Path]
        Asset files copied to the output directory.
    failures : int
        Number of files or pages skipped because of an error.
    """

    pages: list[Path] = dc.field(default_factory=list)
    assets: list[Path] = dc.field(default_factory=list)
    failures: int = 0

    @property
    def ok(self) -> bool:
        """Return ``True`` when nothing was skipped."""
        return self.failures == 0


def render_page(
    page: Page,
    templates: cabc.Mapping[str, Template],
    snippets: cabc.Mapping[str, Snippet],
) -> str:
    """Compose ``page`` into its template and return the document text.

    Raises
    ------
    PageError
        If the page requests a template that does not exist.
    """
    template = templates.get(page.template)
    if template is None:
        msg = (
            f"Page `{page.source}` requested template `{page.template}`, "
            "which does not exist"
        )
        raise PageError(msg)
    rendered = render(template.element, page.slots, snippets)
    return f"{DOCTYPE_HEADER}{serialize(rendered)}"


class SiteBuilder:
    """Render every page of a site described by a :class:`SiteConfig`."""

    def __init__(self, config: SiteConfig) -> None:
        """Initialize the builder.

        Parameters
        ----------
        config : SiteConfig
            Parsed configuration; its root and output directories resolve
            relative to the configuration file's directory.
        """
        self.config = config
        self.root_dir = config.root_dir
        self.output_dir = config.output_root

    def run(self) -> BuildReport:
        """Build the site and return what was written.

        Raises
        ------
        SiteBuildError
            If the root directory is missing, the output directory cannot be
            created, or the output directory is the root directory itself.
        """
        self._require_root_dir()
        self._ensure_output_dir()

        paths = self.discover()
        report = BuildReport()

        logger.info("Reading templates %s", self.config.templates)
        templates = load_templates(paths.templates, root=self.root_dir)
        logger.info("Reading snippets %s", self.config.snippets)
        snippets = load_snippets(paths.snippets, root=self.root_dir)
        logger.info("Reading pages %s", self.config.pages)
        pages = load_pages(paths.pages, root=self.root_dir)
        report.failures += len(paths.templates) - len(templates)
        report.failures += len(paths.snippets) - len(snippets)
        report.failures += len(paths.pages) - len(pages)

        self._copy_assets(paths.assets, report)
        self._write_pages(pages.values(), templates, snippets, report)
        return report

    def discover(self) -> SitePaths:
        """Partition the files under the root directory into categories."""
        claimed = ClaimedPaths()
        root = self.root_dir
        paths = SitePaths()
        paths.excluded = partition(self.config.exclude, claimed, root=root)
        paths.output = partition(self._output_patterns(), claimed, root=root)
        paths.templates = partition(self.config.templates, claimed, root=root)
        paths.snippets = partition(self.config.snippets, claimed, root=root)
        paths.data = partition(self.config.data, claimed, root=root)
        paths.pages = partition(self.config.pages, claimed, root=root)
        paths.assets = partition(self.config.assets, claimed, root=root)
        if paths.data:
            logger.info("Reserved %d data files; they are not rendered", len(paths.data))
        return paths

    def _require_root_dir(self) -> None:
        if not self.root_dir.is_dir():
            msg = f"{self.root_dir} is not a directory."
            raise SiteBuildError(msg)
        logger.info("Using root directory %s", self.root_dir)

    def _ensure_output_dir(self) -> None:
        if self.output_dir.is_dir():
            logger.info("Output directory found %s", self.output_dir)
            return
        logger.info("Creating output directory %s", self.output_dir)
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            msg = f"Output directory {self.output_dir} could not be created. Cause: {exc}"
            raise SiteBuildError(msg) from exc

    def _output_patterns(self) -> list[str]:
        """Return a pattern claiming the output directory when it is under root."""
        try:
            relative = self.output_dir.resolve().relative_to(self.root_dir.resolve())
        except ValueError:
            return []
        if relative == Path():
            msg = f"Output directory {self.output_dir} must not be the root directory."
            raise SiteBuildError(msg)
        return [f"{relative.as_posix()}/**/*"]

    def _copy_assets(self, assets: cabc.Iterable[Path], report: BuildReport) -> None:
        for asset in assets:
            target = self.output_dir / asset
            logger.info("Copying file %s", asset)
            try:
                target.parent.mkdir(parents=True, exist_ok=True)
                shutil.copy2(self.root_dir / asset, target)
            except OSError as exc:
                logger.error("Failed to copy %s. Cause: %s", asset, exc)
                report.failures += 1
                continue
            report.assets.append(target)

    def _write_pages(
        self,
        pages: cabc.Iterable[Page],
        templates: cabc.Mapping[str, Template],
        snippets: cabc.Mapping[str, Snippet],
        report: BuildReport,
    ) -> None:
        for page in pages:
            logger.info("Writing page %s", page.source)
            try:
                document = render_page(page, templates, snippets)
            except PageError as exc:
                logger.error("Failed to render page %s. Cause: %s", page.source, exc)
                report.failures += 1
                continue
            target = self.output_dir / page.output_path
            try:
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_text(document, encoding="utf-8", newline="")
            except OSError as exc:
                logger.error("Failed to write page %s. Cause: %s", page.source, exc)
                report.failures += 1
                continue
            report.pages.append(target)


__all__ = [
    "BuildReport",
    "SiteBuildError",
    "SiteBuilder",
    "SitePaths",
    "render_page",
]
