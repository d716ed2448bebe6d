"""Locate and load a site configuration file into a :class:`SiteConfig`."""

from __future__ import annotations

import tomllib
import typing as typ
from pathlib import Path

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .._constants import DEFAULT_CONFIG_NAME
from .helpers import _data_patterns, _directory, _pattern_list, _setting
from .models import (
    DEFAULT_ASSETS,
    DEFAULT_DIR,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_PAGES,
    DEFAULT_SNIPPETS,
    DEFAULT_TEMPLATES,
    SiteConfig,
    SiteConfigError,
)

_YAML_SUFFIXES = (".yaml", ".yml")


def find_config_file(path: Path | None = None, *, cwd: Path | None = None) -> Path:
    """Return the configuration file to use for a build.

    The file is looked up as follows:

    * ``path`` itself when it names a file;
    * ``path / "site.toml"`` when ``path`` names a directory;
    * ``./site.toml`` when ``path`` is ``None``.

    Relative paths are resolved against ``cwd`` (default: the working
    directory).

    Raises
    ------
    FileNotFoundError
        If no configuration file exists at the resolved location.
    """
    base = cwd if cwd is not None else Path.cwd()
    candidate = base if path is None else base / path
    if not candidate.is_file():
        candidate /= DEFAULT_CONFIG_NAME
    if not candidate.is_file():
        msg = f"{candidate} not found."
        raise FileNotFoundError(msg)
    return candidate


def _read_raw(path: Path) -> object:
    """Parse ``path`` as TOML or YAML depending on its suffix."""
    suffix = path.suffix.lower()
    try:
        if suffix in _YAML_SUFFIXES:
            loader = YAML(typ="safe")
            loader.version = (1, 2)
            with path.open("r", encoding="utf-8") as handle:
                return loader.load(handle) or {}
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except (tomllib.TOMLDecodeError, YAMLError) as exc:
        msg = f"{path} could not be parsed as a config file. Cause: {exc}"
        raise SiteConfigError(msg) from exc


def load_site_config(path: Path) -> SiteConfig:
    """Load the site configuration stored at ``path``.

    Parameters
    ----------
    path : Path
        TOML file (``site.toml``) or YAML file (``.yaml``/``.yml``). Missing
        keys take their defaults; unknown keys are ignored.
        The split ``datasets`` and ``datarows`` pattern lists are accepted in
        place of ``data``.

    Returns
    -------
    SiteConfig
        Configuration whose directories resolve relative to the file's
        directory.

    Raises
    ------
    FileNotFoundError
        If ``path`` does not exist.
    SiteConfigError
        If the file cannot be parsed, its top level is not a mapping, or a
        setting has the wrong type.

    Examples
    --------
    >>> from pathlib import Path
    >>> from oeuvre.config import load_site_config
    >>> config = load_site_config(Path("site.toml"))  # doctest: +SKIP
    >>> config.templates  # doctest: +SKIP
    ['templates/**/*.xml']
    """
    if not path.exists():
        msg = f"Configuration file '{path}' not found."
        raise FileNotFoundError(msg)

    loaded = _read_raw(path)
    if not isinstance(loaded, dict):
        msg = "Top-level configuration must be a mapping."
        raise SiteConfigError(msg)
    raw: dict[str, typ.Any] = dict(loaded)

    return SiteConfig(
        config_dir=path.parent,
        dir=_directory(_setting(raw, "dir", DEFAULT_DIR), key="dir"),
        output_dir=_directory(
            _setting(raw, "output_dir", DEFAULT_OUTPUT_DIR), key="output_dir"
        ),
        exclude=_pattern_list(_setting(raw, "exclude", []), key="exclude"),
        templates=_pattern_list(
            _setting(raw, "templates", list(DEFAULT_TEMPLATES)), key="templates"
        ),
        snippets=_pattern_list(
            _setting(raw, "snippets", list(DEFAULT_SNIPPETS)), key="snippets"
        ),
        data=_data_patterns(raw),
        pages=_pattern_list(_setting(raw, "pages", list(DEFAULT_PAGES)), key="pages"),
        assets=_pattern_list(
            _setting(raw, "assets", list(DEFAULT_ASSETS)), key="assets"
        ),
    )


__all__ = ["find_config_file", "load_site_config"]
