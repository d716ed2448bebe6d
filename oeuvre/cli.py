"""Cyclopts CLI entrypoint for building oeuvre sites.

The ``oeuvre`` console script exposes two commands: ``build`` composes every
page of a site into its output directory, and ``init`` scaffolds a new site
with a default ``site.toml``. Options may also be supplied through
``OEUVRE_``-prefixed environment variables.

Examples
--------
Build the site described by ``./site.toml``:

>>> from oeuvre.cli import main
>>> main()  # doctest: +SKIP

Build a site in another directory with debug logging:

>>> from oeuvre.cli import app
>>> app(["build", "sites/blog", "--verbose"])  # doctest: +SKIP
"""

from __future__ import annotations

import logging
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from ._constants import DEFAULT_CONFIG_NAME
from .config import find_config_file, load_site_config, write_default_config
from .site import SiteBuilder

SCAFFOLD_DIRECTORIES = ("templates", "snippets", "assets")

app = App(name="oeuvre", config=cyclopts.config.Env("OEUVRE_", command=False))  # type: ignore[unknown-argument]


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


def _configure_logging(*, verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command(help="Compose every page of a site into its output directory.")
def build(
    config: typ.Annotated[
        Path | None,
        Parameter(help="Config file, or a directory containing site.toml"),
    ] = None,
    *,
    verbose: typ.Annotated[bool, Parameter(help="Log debug detail")] = False,
    strict: typ.Annotated[
        bool, Parameter(help="Exit with status 1 if any file was skipped")
    ] = False,
) -> None:
    """Build the site described by ``config``.

    Parameters
    ----------
    config : Path or None, optional
        Configuration file, or a directory holding ``site.toml``. Defaults to
        ``./site.toml``.
    verbose : bool, optional
        Enable debug logging.
    strict : bool, optional
        Exit with status 1 when any template, snippet, page, or asset was
        skipped because of an error.

    Raises
    ------
    FileNotFoundError
        If no configuration file is found.
    SiteConfigError
        If the configuration file is invalid.
    SiteBuildError
        If the root directory is missing or the output directory cannot be
        created.
    SystemExit
        With status 1 when ``strict`` is set and the build skipped files.
    """
    _configure_logging(verbose=verbose)
    config_path = find_config_file(config)
    logging.getLogger(__name__).info("Reading config file %s", config_path)
    site_config = load_site_config(config_path)

    report = SiteBuilder(site_config).run()
    for path in report.pages:
        print(f"wrote {_format_path(path)}")
    print(
        f"{len(report.pages)} pages written, {len(report.assets)} assets copied, "
        f"{report.failures} skipped"
    )
    if strict and not report.ok:
        raise SystemExit(1)


@app.command(help="Create a site.toml and the default source directories.")
def init(
    directory: typ.Annotated[
        Path, Parameter(help="Directory to initialize")
    ] = Path(),
    *,
    force: typ.Annotated[
        bool, Parameter(help="Overwrite an existing site.toml")
    ] = False,
) -> None:
    """Scaffold a new site in ``directory``.

    Raises
    ------
    FileExistsError
        If ``site.toml`` already exists and ``force`` is not set.
    """
    config_path = write_default_config(directory / DEFAULT_CONFIG_NAME, force=force)
    print(f"wrote {_format_path(config_path)}")
    for name in SCAFFOLD_DIRECTORIES:
        (directory / name).mkdir(parents=True, exist_ok=True)


def main() -> None:
    """Invoke the Cyclopts application behind the ``oeuvre`` console command."""
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
