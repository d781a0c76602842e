"""Directory batch processing: clean every glTF file, then hand it to gltfpack."""

from __future__ import annotations

import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path

from glb_strip.codec import read_document, write_document
from glb_strip.errors import GlbStripError
from glb_strip.pipeline import CleanResult, clean
from glb_strip.utils import iter_gltf_files
from glb_strip.utils.gltfpack import run_gltfpack
from glb_strip.utils.logging import (
    bright_cyan,
    cyan,
    dim,
    format_bytes,
    format_count,
    format_duration,
    log_detail,
    log_error,
    log_info,
    log_ok,
    print_header,
    timed,
)


@dataclass
class BatchSummary:
    """Per-run counters."""

    total: int = 0
    ok: int = 0
    failed: int = 0
    pack_failed: int = 0

    @property
    def success(self) -> bool:
        return self.failed == 0 and self.pack_failed == 0


def clean_file(input_path: Path, output_path: Path) -> CleanResult:
    """
    Read, clean and write one file.

    Raises:
        DecodeError, PipelineError, EncodeError: the file could not be cleaned.
    """
    document = read_document(input_path)
    result = clean(document)
    if result.error is not None:
        raise result.error
    write_document(result.document, output_path)
    return result


def _describe(result: CleanResult) -> str:
    stats = result.stats
    parts = [
        format_count(stats.cameras_removed, "camera"),
        format_count(stats.lights_removed, "light"),
        format_count(stats.nodes_removed, "node"),
        f"{format_count(stats.total_resources_disposed, 'resource')} removed",
    ]
    return ", ".join(parts)


def _remove_staged(staged: list[Path], stage_root: Path) -> None:
    """Delete staged files and any directories left empty under stage_root."""
    for path in staged:
        path.unlink(missing_ok=True)
        parent = path.parent
        while parent != stage_root and parent.is_dir() and not any(parent.iterdir()):
            parent.rmdir()
            parent = parent.parent


def process_directory(
    input_root: str | Path,
    output_root: str | Path,
    *,
    pack: bool = True,
    temp_root: str | Path | None = None,
    keep_temp: bool = False,
    texture_compress: bool = True,
    mesh_compress: bool = True,
) -> BatchSummary:
    """
    Clean every .glb/.gltf under input_root, mirroring the tree in output_root.

    With pack=True, cleaned files are staged under temp_root (a fresh temporary
    directory by default) and gltfpack writes the final output. A failing file
    is reported and skipped; it never stops the batch.
    """
    in_root = Path(input_root).resolve()
    out_root = Path(output_root).resolve()
    summary = BatchSummary()
    # Snapshot first: the output or staging tree may live under input_root
    files = list(iter_gltf_files(in_root))

    owns_stage = pack and temp_root is None
    if not pack:
        stage_root = out_root
    elif temp_root is None:
        stage_root = Path(tempfile.mkdtemp(prefix="glb-strip-"))
    else:
        stage_root = Path(temp_root).resolve()
    staged: list[Path] = []

    print_header("GLB STRIP")
    log_info(f"Input:  {cyan(str(in_root))}")
    log_info(f"Output: {cyan(str(out_root))}")
    if pack:
        log_info(f"Staging: {dim(str(stage_root))}")

    try:
        for file in files:
            summary.total += 1
            rel = file.relative_to(in_root)
            staged_path = stage_root / rel
            if pack:
                staged.append(staged_path)

            try:
                with timed(str(rel)) as t:
                    result = clean_file(file, staged_path)
            except GlbStripError as e:
                summary.failed += 1
                log_error(f"{rel}")
                log_detail(str(e))
                continue

            summary.ok += 1
            log_ok(f"{rel} {dim(f'({format_duration(t.elapsed)})')}")
            log_detail(dim(_describe(result)))

            if not pack:
                continue

            success, packed_path, message = run_gltfpack(
                staged_path,
                out_root / rel,
                texture_compress=texture_compress,
                mesh_compress=mesh_compress,
            )
            if success:
                size = format_bytes(packed_path.stat().st_size)
                log_detail(f"gltfpack -> {bright_cyan(size)}")
            else:
                summary.pack_failed += 1
                log_error(f"{rel}: {message}")
    finally:
        if pack and not keep_temp:
            if owns_stage:
                shutil.rmtree(stage_root, ignore_errors=True)
            else:
                _remove_staged(staged, stage_root)

    done = f"Done. total={summary.total} ok={summary.ok} failed={summary.failed}"
    if pack:
        done += f" pack_failed={summary.pack_failed}"
    print()
    log_info(done)
    return summary
