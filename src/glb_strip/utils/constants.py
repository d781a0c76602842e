"""Constants and defaults for glTF cleaning."""

from typing import TypedDict

# glTF extension names the cleaner understands
LIGHTS_EXTENSION = "KHR_lights_punctual"
DRACO_EXTENSION = "KHR_draco_mesh_compression"
MATERIAL_VARIANTS_EXTENSION = "KHR_materials_variants"
GPU_INSTANCING_EXTENSION = "EXT_mesh_gpu_instancing"
MESHOPT_EXTENSIONS = ("EXT_meshopt_compression", "KHR_meshopt_compression")

# Files picked up when walking an input directory (compared lowercase)
GLTF_SUFFIXES: tuple[str, ...] = (".glb", ".gltf")

# gltfpack subprocess timeout in seconds
GLTFPACK_TIMEOUT = 300


class BatchConfig(TypedDict):
    """Configuration for a batch cleaning run."""

    pack: bool
    texture_compress: bool
    mesh_compress: bool
    keep_temp: bool


# Default configuration for a batch run
DEFAULT_CONFIG: BatchConfig = {
    "pack": True,  # Hand every cleaned file to gltfpack
    "texture_compress": True,  # gltfpack -tc
    "mesh_compress": True,  # gltfpack -cc
    "keep_temp": False,  # Keep intermediate (pre-gltfpack) files
}
