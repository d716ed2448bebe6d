"""Load and validate the site configuration for oeuvre builds.

This subpackage locates ``site.toml`` (or a YAML equivalent), applies the
defaults for every category of glob patterns, and produces a
:class:`SiteConfig` that the site builder consumes. The primary entry points
are :func:`find_config_file` and :func:`load_site_config`;
:func:`write_default_config` scaffolds a new configuration file.

Examples
--------
>>> from oeuvre.config import find_config_file, load_site_config
>>> config = load_site_config(find_config_file())  # doctest: +SKIP
>>> config.root_dir  # doctest: +SKIP
PosixPath('.')
"""

from .loader import find_config_file, load_site_config
from .models import SiteConfig, SiteConfigError
from .scaffold import render_default_config, write_default_config

__all__ = [
    "SiteConfig",
    "SiteConfigError",
    "find_config_file",
    "load_site_config",
    "render_default_config",
    "write_default_config",
]
