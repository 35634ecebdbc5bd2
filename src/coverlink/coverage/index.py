"""Artifact index: class identifier → compiled class file.

Class identifiers use slash notation relative to the binary root, without the
artifact extension (``com/foo/Bar$Inner`` for ``com/foo/Bar$Inner.class``).
"""

from __future__ import annotations

import os
from collections.abc import Iterable
from pathlib import Path

import structlog

log = structlog.get_logger()

ArtifactIndex = dict[str, Path]

DEFAULT_EXTENSION = ".class"


def populate_artifact_index(
    index: ArtifactIndex,
    directory: Path,
    prefix: str = "",
    *,
    extension: str = DEFAULT_EXTENSION,
) -> None:
    """Add every artifact below ``directory`` to ``index``.

    Directories that cannot be listed are skipped without error.
    """
    try:
        entries = list(os.scandir(directory))
    except OSError:
        log.debug("artifact_index.unlistable", path=str(directory))
        return

    for entry in entries:
        try:
            if entry.is_dir():
                populate_artifact_index(
                    index, Path(entry.path), f"{prefix}{entry.name}/", extension=extension
                )
            elif entry.is_file() and entry.name.endswith(extension):
                index[prefix + entry.name[: -len(extension)]] = Path(entry.path)
        except OSError:
            log.debug("artifact_index.stat_failed", path=entry.path)


def build_artifact_index(
    roots: Iterable[Path], *, extension: str = DEFAULT_EXTENSION
) -> ArtifactIndex:
    """Scan all binary roots and return a fresh artifact index."""
    index: ArtifactIndex = {}
    for root in roots:
        populate_artifact_index(index, Path(root), extension=extension)
    log.debug("artifact_index.built", artifacts=len(index))
    return index


def artifacts_for_names(index: ArtifactIndex, names: Iterable[str]) -> list[Path]:
    """Class files for the given class identifiers, skipping unknown names."""
    return [index[name] for name in names if name in index]
