"""Reading and writing glTF documents."""

from glb_strip.codec.gltf import (
    document_from_json,
    document_to_json,
    read_document,
    write_document,
)

__all__ = [
    "document_from_json",
    "document_to_json",
    "read_document",
    "write_document",
]
