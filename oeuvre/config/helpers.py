"""Utility helpers shared by the oeuvre configuration loader."""

from __future__ import annotations

import typing as typ

from .models import (
    DEFAULT_DATA,
    DEFAULT_DATAROWS,
    DEFAULT_DATASETS,
    SiteConfigError,
)


def _pattern_list(value: object, *, key: str) -> list[str]:
    """Normalize a pattern setting into a list of non-empty strings.

    A single string is accepted as a one-element list.
    """
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        msg = f"'{key}' must be a string or a list of strings."
        raise SiteConfigError(msg)
    patterns: list[str] = []
    for entry in value:
        if not isinstance(entry, str):
            msg = f"'{key}' entries must be strings, got {entry!r}."
            raise SiteConfigError(msg)
        text = entry.strip()
        if text:
            patterns.append(text)
    return patterns


def _directory(value: object, *, key: str) -> str:
    """Return a directory setting as a non-empty string."""
    if not isinstance(value, str) or not value.strip():
        msg = f"'{key}' must be a non-empty string."
        raise SiteConfigError(msg)
    return value.strip()


def _setting(
    raw: typ.Mapping[str, typ.Any], key: str, default: typ.Any
) -> typ.Any:
    """Return ``raw[key]``, treating a missing or null value as ``default``."""
    value = raw.get(key)
    return default if value is None else value


def _data_patterns(raw: typ.Mapping[str, typ.Any]) -> list[str]:
    """Return the data patterns, accepting the split ``datasets``/``datarows`` keys.

    ``data`` wins when present. Otherwise, if either ``datasets`` or
    ``datarows`` is set, the two lists are joined, each falling back to its own
    default when missing.
    """
    if raw.get("data") is not None or (
        raw.get("datasets") is None and raw.get("datarows") is None
    ):
        return _pattern_list(_setting(raw, "data", list(DEFAULT_DATA)), key="data")
    datasets = _pattern_list(
        _setting(raw, "datasets", list(DEFAULT_DATASETS)), key="datasets"
    )
    datarows = _pattern_list(
        _setting(raw, "datarows", list(DEFAULT_DATAROWS)), key="datarows"
    )
    return datasets + [pattern for pattern in datarows if pattern not in datasets]


__all__ = ["_data_patterns", "_directory", "_pattern_list", "_setting"]
