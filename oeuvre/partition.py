"""Assign every discovered file to exactly one processing category.

A build expands the glob patterns of each category in a fixed priority order
(excludes, output directory, templates, snippets, data, pages, assets). Each
call to :func:`partition` keeps only the matches that no earlier category has
claimed, then claims them, so a file can never be processed twice even when
several categories' patterns match it.

The subtraction is a single merge over two sorted sequences, so results do not
depend on filesystem enumeration order.

Example
-------
>>> from pathlib import Path
>>> from oeuvre.partition import ClaimedPaths, partition
>>> claimed = ClaimedPaths()
>>> templates = partition(["templates/**/*.xml"], claimed, root=Path("site"))  # doctest: +SKIP
>>> pages = partition(["**/*.xml"], claimed, root=Path("site"))  # doctest: +SKIP
>>> set(templates).isdisjoint(pages)  # doctest: +SKIP
True
"""

from __future__ import annotations

import bisect
import collections.abc as cabc
import logging
from pathlib import Path, PurePath

logger = logging.getLogger(__name__)


class ClaimedPaths:
    """Sorted, growing set of root-relative paths already assigned a category.

    The set only ever grows during a run. It is threaded explicitly through
    successive :func:`partition` calls, one per category.
    """

    def __init__(self, paths: cabc.Iterable[Path] = ()) -> None:
        self._paths: list[Path] = sorted(set(paths))

    def __len__(self) -> int:
        return len(self._paths)

    def __iter__(self) -> cabc.Iterator[Path]:
        return iter(self._paths)

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, PurePath):
            return False
        index = bisect.bisect_left(self._paths, path)
        return index < len(self._paths) and self._paths[index] == path

    def __repr__(self) -> str:
        return f"ClaimedPaths({len(self._paths)} paths)"

    def claim(self, paths: cabc.Iterable[Path]) -> None:
        """Add ``paths`` to the set, keeping it sorted and duplicate free."""
        self._paths = sorted(set(self._paths).union(paths))


def expand_patterns(patterns: cabc.Iterable[str], *, root: Path) -> list[Path]:
    """Return the sorted, de-duplicated files under ``root`` matching ``patterns``.

    Patterns are evaluated relative to ``root`` and the results are relative
    to it as well. Directories are skipped. An invalid pattern, or a match
    that cannot be inspected, is logged and dropped.
    """
    found: set[Path] = set()
    for pattern in patterns:
        if ".." in PurePath(pattern).parts:
            logger.error(
                "%s is not a valid glob pattern. Cause: patterns may not leave the "
                "root directory",
                pattern,
            )
            continue
        try:
            matches = list(root.glob(pattern))
        except (ValueError, NotImplementedError) as exc:
            logger.error("%s is not a valid glob pattern. Cause: %s", pattern, exc)
            continue
        for match in matches:
            try:
                if not match.is_file():
                    continue
            except OSError as exc:
                logger.error("Globbed path %s could not be read. Cause: %s", match, exc)
                continue
            found.add(match.relative_to(root))
    return sorted(found)


def _subtract_sorted(
    matches: cabc.Sequence[Path], claimed: cabc.Iterable[Path]
) -> list[Path]:
    """Return ``matches`` minus ``claimed``; both inputs must be sorted."""
    heads = iter(claimed)
    head = next(heads, None)
    kept: list[Path] = []
    for path in matches:
        while head is not None and head < path:
            head = next(heads, None)
        if head is not None and head == path:
            head = next(heads, None)
            continue
        kept.append(path)
    return kept


def partition(
    patterns: cabc.Iterable[str], claimed: ClaimedPaths, *, root: Path | None = None
) -> list[Path]:
    """Claim and return the files matching ``patterns`` not yet claimed.

    Parameters
    ----------
    patterns : Iterable[str]
        Glob patterns for one category, relative to ``root``.
    claimed : ClaimedPaths
        Paths taken by earlier categories. Updated in place with the result.
    root : Path, optional
        Directory the patterns are evaluated against; defaults to the current
        working directory.

    Returns
    -------
    list[Path]
        Sorted root-relative paths newly assigned to this category.
    """
    base = root if root is not None else Path.cwd()
    matches = expand_patterns(patterns, root=base)
    kept = _subtract_sorted(matches, claimed)
    claimed.claim(kept)
    logger.debug("Claimed %d of %d matched paths", len(kept), len(matches))
    return kept


__all__ = ["ClaimedPaths", "expand_patterns", "partition"]
