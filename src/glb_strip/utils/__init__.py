"""Filesystem helpers for locating glTF files."""

from collections.abc import Iterator
from pathlib import Path

from glb_strip.utils.constants import GLTF_SUFFIXES


def is_gltf_file(path: Path) -> bool:
    """True for .glb/.gltf files, case-insensitive."""
    return path.suffix.lower() in GLTF_SUFFIXES


def iter_gltf_files(root: Path) -> Iterator[Path]:
    """
    Recursively yield glTF files under root.

    Directory entries are visited in sorted order so batch runs are
    reproducible across platforms.
    """
    for entry in sorted(root.iterdir()):
        if entry.is_dir():
            yield from iter_gltf_files(entry)
        elif entry.is_file() and is_gltf_file(entry):
            yield entry
