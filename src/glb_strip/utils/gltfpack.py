"""Wrapper for the gltfpack mesh/texture compression tool."""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path
from typing import TypeAlias

from glb_strip.utils.constants import GLTFPACK_TIMEOUT

# (success, output_path, message)
GltfpackResult: TypeAlias = tuple[bool, Path, str]


def find_gltfpack() -> str | None:
    """Find gltfpack executable in PATH."""
    return shutil.which("gltfpack")


def build_command(
    gltfpack: str,
    input_path: Path,
    output_path: Path,
    *,
    texture_compress: bool = True,
    mesh_compress: bool = True,
) -> list[str]:
    """Build the gltfpack argument vector."""
    cmd = [gltfpack, "-i", str(input_path), "-o", str(output_path)]
    if texture_compress:
        cmd.append("-tc")
    if mesh_compress:
        cmd.append("-cc")
    return cmd


def _run_gltfpack_process(cmd: list[str], output_path: Path) -> GltfpackResult:
    """Execute gltfpack and translate every failure into a result tuple."""
    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=GLTFPACK_TIMEOUT,
        )
    except subprocess.TimeoutExpired:
        return False, output_path, f"gltfpack timed out after {GLTFPACK_TIMEOUT}s"
    except subprocess.SubprocessError as e:
        return False, output_path, f"gltfpack subprocess error: {e}"
    except OSError as e:
        return False, output_path, f"gltfpack could not be started: {e}"

    if result.returncode != 0:
        reason = result.stderr.strip() or result.stdout.strip() or f"exit code {result.returncode}"
        return False, output_path, f"gltfpack failed: {reason}"
    if not output_path.is_file():
        return False, output_path, "gltfpack exited cleanly but wrote no output"
    return True, output_path, "Success"


def run_gltfpack(
    input_path: str | Path,
    output_path: str | Path,
    *,
    texture_compress: bool = True,
    mesh_compress: bool = True,
) -> GltfpackResult:
    """
    Compress a cleaned GLB/glTF file with gltfpack.

    Args:
        input_path: Cleaned (staged) file
        output_path: Final output file; parent directories are created
        texture_compress: Enable texture compression (-tc)
        mesh_compress: Enable mesh compression (-cc)

    Returns:
        Tuple of (success, output_path, message)
    """
    input_path = Path(input_path)
    output_path = Path(output_path)

    gltfpack = find_gltfpack()
    if not gltfpack:
        return False, output_path, "gltfpack not found in PATH"
    if not input_path.is_file():
        return False, output_path, f"staged file missing: {input_path}"

    output_path.parent.mkdir(parents=True, exist_ok=True)
    cmd = build_command(
        gltfpack,
        input_path,
        output_path,
        texture_compress=texture_compress,
        mesh_compress=mesh_compress,
    )
    return _run_gltfpack_process(cmd, output_path)
