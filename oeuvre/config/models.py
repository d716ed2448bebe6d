"""Typed dataclasses describing an oeuvre site configuration."""

from __future__ import annotations

import dataclasses as dc
import os
from pathlib import Path

DEFAULT_DIR = "./"
DEFAULT_OUTPUT_DIR = "output/"
DEFAULT_TEMPLATES = ("templates/**/*.xml",)
DEFAULT_SNIPPETS = ("snippets/**/*.xml",)
DEFAULT_DATA = ("data/**/*.xml",)
DEFAULT_DATASETS = ("data/*.xml",)
DEFAULT_DATAROWS = ("data/*/**/*.xml",)
DEFAULT_PAGES = ("**/*.xml",)
DEFAULT_ASSETS = ("assets/**",)


class SiteConfigError(ValueError):
    """Raised when the site configuration is invalid."""


@dc.dataclass(slots=True)
class SiteConfig:
    """Directories and per-category glob patterns for one site build.

    ``dir`` and ``output_dir`` are relative to ``config_dir``, the directory
    holding the configuration file. Glob patterns are relative to the root
    directory.
    """

    config_dir: Path = Path()
    dir: str = DEFAULT_DIR
    output_dir: str = DEFAULT_OUTPUT_DIR
    exclude: list[str] = dc.field(default_factory=list)
    templates: list[str] = dc.field(default_factory=lambda: list(DEFAULT_TEMPLATES))
    snippets: list[str] = dc.field(default_factory=lambda: list(DEFAULT_SNIPPETS))
    data: list[str] = dc.field(default_factory=lambda: list(DEFAULT_DATA))
    pages: list[str] = dc.field(default_factory=lambda: list(DEFAULT_PAGES))
    assets: list[str] = dc.field(default_factory=lambda: list(DEFAULT_ASSETS))

    @property
    def root_dir(self) -> Path:
        """Return the normalized directory the glob patterns are evaluated in."""
        return Path(os.path.normpath(self.config_dir / self.dir))

    @property
    def output_root(self) -> Path:
        """Return the normalized directory rendered files are written to."""
        return Path(os.path.normpath(self.config_dir / self.output_dir))


__all__ = [
    "DEFAULT_ASSETS",
    "DEFAULT_DATA",
    "DEFAULT_DATAROWS",
    "DEFAULT_DATASETS",
    "DEFAULT_DIR",
    "DEFAULT_OUTPUT_DIR",
    "DEFAULT_PAGES",
    "DEFAULT_SNIPPETS",
    "DEFAULT_TEMPLATES",
    "SiteConfig",
    "SiteConfigError",
]
