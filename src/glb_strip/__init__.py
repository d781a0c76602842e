"""
glb-strip
=========
Batch-cleans glTF/GLB scenes before mesh optimization.

Per document:
- Detaches cameras and KHR_lights_punctual lights from every node
- Removes empty leaf nodes until none remain (chains collapse)
- Garbage-collects meshes, materials, textures, accessors, buffers, skins,
  animations and the rest of the pool that no scene reaches anymore

Per batch:
- Mirrors an input directory tree into an output directory
- Hands every cleaned file to gltfpack (-tc -cc)

Usage:
    CLI:
        glb-strip models/ cleaned/
        glb-strip models/ cleaned/ --no-pack

    Python:
        from glb_strip import clean, read_document, write_document

        document = read_document("model.glb")
        result = clean(document)
        if result.ok:
            write_document(result.document, "model_clean.glb")
"""

from importlib.metadata import PackageNotFoundError, version

from glb_strip.cli import main
from glb_strip.codec import read_document, write_document
from glb_strip.pipeline import CleanResult, clean

try:
    __version__ = version("glb-strip")
except PackageNotFoundError:
    __version__ = "unknown"

__all__ = ["CleanResult", "clean", "main", "read_document", "write_document"]
