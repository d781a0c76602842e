"""Command-line interface for glb-strip."""

from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from glb_strip.batch import process_directory
from glb_strip.utils.constants import DEFAULT_CONFIG
from glb_strip.utils.gltfpack import find_gltfpack

try:
    __version__ = version("glb-strip")
except PackageNotFoundError:
    __version__ = "unknown"

app = typer.Typer(
    name="glb-strip",
    help="Strip cameras, lights and dead nodes from glTF/GLB files, then gltfpack them",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True,
)
console = Console()


def version_callback(value: bool) -> None:
    if value:
        print(f"glb-strip {__version__}")
        raise typer.Exit()


@app.command()
def strip(
    input_dir: Annotated[
        Path,
        typer.Argument(
            help="Directory searched recursively for [bold green].glb[/] and [bold green].gltf[/] files",
            metavar="INPUT_DIR",
        ),
    ],
    output_dir: Annotated[
        Path,
        typer.Argument(
            help="Directory receiving the cleaned files (same relative layout)",
            metavar="OUTPUT_DIR",
        ),
    ],
    pack: Annotated[
        bool,
        typer.Option(
            "--pack/--no-pack",
            help="Run gltfpack on every cleaned file",
            rich_help_panel="gltfpack",
        ),
    ] = DEFAULT_CONFIG["pack"],
    texture_compress: Annotated[
        bool,
        typer.Option(
            "--texture-compress/--no-texture-compress",
            help="gltfpack texture compression ([italic]-tc[/])",
            rich_help_panel="gltfpack",
        ),
    ] = DEFAULT_CONFIG["texture_compress"],
    mesh_compress: Annotated[
        bool,
        typer.Option(
            "--mesh-compress/--no-mesh-compress",
            help="gltfpack mesh compression ([italic]-cc[/])",
            rich_help_panel="gltfpack",
        ),
    ] = DEFAULT_CONFIG["mesh_compress"],
    temp_dir: Annotated[
        Path | None,
        typer.Option(
            "--temp-dir",
            help="Where cleaned files wait for gltfpack (default: a fresh temp directory)",
            rich_help_panel="Staging",
        ),
    ] = None,
    keep_temp: Annotated[
        bool,
        typer.Option(
            "--keep-temp/",
            help="Keep staged files after gltfpack ran",
            rich_help_panel="Staging",
        ),
    ] = DEFAULT_CONFIG["keep_temp"],
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-v",
            callback=version_callback,
            is_eager=True,
            help="Show the version and exit.",
        ),
    ] = None,
) -> None:
    """
    Clean every glTF file under INPUT_DIR into OUTPUT_DIR.
    """
    abs_input = input_dir.resolve()
    if not abs_input.is_dir():
        console.print(f"[bold red][ERROR][/] Directory not found: {abs_input}")
        raise typer.Exit(code=1)

    if pack and find_gltfpack() is None:
        console.print("[bold red][ERROR][/] gltfpack not found in PATH")
        console.print("        Install it or pass [bold]--no-pack[/]")
        raise typer.Exit(code=1)

    summary = process_directory(
        abs_input,
        output_dir,
        pack=pack,
        temp_root=temp_dir,
        keep_temp=keep_temp,
        texture_compress=texture_compress,
        mesh_compress=mesh_compress,
    )

    if not summary.success:
        raise typer.Exit(code=1)


def main() -> None:
    """Console-script entry point."""
    app()


if __name__ == "__main__":
    main()
