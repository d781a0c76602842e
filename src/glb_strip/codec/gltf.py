"""GLB/glTF decoding and encoding between files and Document."""

from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any

from pygltflib import GLTF2, BufferFormat
from pygltflib.utils import ImageFormat

from glb_strip.document import Document
from glb_strip.errors import DecodeError, EncodeError
from glb_strip.references import NODES, ResourceKind, iter_node_slots, iter_slots
from glb_strip.utils.constants import LIGHTS_EXTENSION


def _drop_none(value: Any) -> Any:
    """Recursively remove None values from JSON-like data."""
    if isinstance(value, dict):
        return {k: _drop_none(v) for k, v in value.items() if v is not None}
    if isinstance(value, list):
        return [_drop_none(v) for v in value]
    return value


def _pop_extension(payload: dict[str, Any], name: str) -> Any:
    """Remove one extension from a payload, dropping an emptied `extensions`."""
    extensions = payload.get("extensions")
    if not isinstance(extensions, dict) or name not in extensions:
        return None
    value = extensions.pop(name)
    if not extensions:
        del payload["extensions"]
    return value


# =============================================================================
# Decode
# =============================================================================


def document_from_json(data: dict[str, Any], binary_blob: bytes | None = None) -> Document:
    """
    Build a Document from glTF JSON.

    Node references (children, mesh, camera, skin, punctual light) are lifted
    into Node fields; everything else stays in the payloads. Malformed
    references are kept as-is for Document.check_invariants() to report.
    """
    # Underscore keys are pygltflib bookkeeping (_path, _glb_data), not glTF
    data = copy.deepcopy(
        {k: v for k, v in _drop_none(data).items() if not k.startswith("_")}
    )

    lights_ext = _pop_extension(data, LIGHTS_EXTENSION)
    document = Document(binary_blob=binary_blob)

    for kind in ResourceKind:
        if kind is ResourceKind.LIGHT:
            entries = lights_ext.get("lights", []) if isinstance(lights_ext, dict) else []
        else:
            entries = data.pop(kind.value, [])
        for entry in entries:
            document.add_resource(kind, entry)

    raw_nodes = data.pop("nodes", [])
    children_of: list[list[int]] = []
    for raw in raw_nodes:
        light_ext = _pop_extension(raw, LIGHTS_EXTENSION)
        children_of.append(list(raw.pop("children", [])))
        document.add_node(
            raw.pop("name", None),
            mesh=raw.pop("mesh", None),
            camera=raw.pop("camera", None),
            skin=raw.pop("skin", None),
            light=light_ext.get("light") if isinstance(light_ext, dict) else None,
            payload=raw,
        )

    for node, children in zip(document.nodes, children_of):
        node.children = children
        for child in children:
            if 0 <= child < len(document.nodes) and document.nodes[child].parent is None:
                document.nodes[child].parent = node.handle

    for raw in data.pop("scenes", []):
        roots = list(raw.pop("nodes", []))
        scene = document.add_scene(raw.pop("name", None), payload=raw)
        scene.nodes = roots

    document.root = data
    return document


def read_document(path: str | Path) -> Document:
    """
    Load a .glb/.gltf file into a Document.

    External buffers and images of a .gltf are embedded as data URIs so the
    document no longer depends on its source directory.

    Raises:
        DecodeError: the file cannot be read or parsed.
    """
    path = Path(path)
    try:
        gltf = GLTF2.load(str(path))
        if gltf is None:
            raise DecodeError(f"{path.name} is not a glTF file")
        if path.suffix.lower() == ".gltf":
            gltf.convert_buffers(BufferFormat.DATAURI)
            gltf.convert_images(ImageFormat.DATAURI)
        data = json.loads(gltf.to_json())
    except DecodeError:
        raise
    except Exception as e:
        # pygltflib surfaces parse failures as assorted builtin exceptions
        raise DecodeError(f"Failed to read {path.name}: {e}") from e

    return document_from_json(data, gltf.binary_blob())


# =============================================================================
# Encode
# =============================================================================


def _index_maps(document: Document) -> dict[str, dict[int, int]]:
    """Old handle -> compacted index, per collection, live entries only."""
    maps = {NODES: {node.handle: i for i, node in enumerate(document.list_nodes())}}
    for kind in ResourceKind:
        maps[kind.value] = {
            r.handle: i for i, r in enumerate(document.list_resources(kind))
        }
    return maps


def document_to_json(document: Document) -> dict[str, Any]:
    """
    Serialize live entities to glTF JSON, renumbering every reference.

    Raises:
        EncodeError: a live entity still references a disposed one.
    """
    maps = _index_maps(document)

    def renumber(target: str, index: int) -> int:
        try:
            return maps[target][index]
        except KeyError:
            raise EncodeError(f"{target}[{index}] is referenced but was removed") from None

    data = copy.deepcopy(document.root)

    collections: dict[ResourceKind, list[dict[str, Any]]] = {}
    for kind in ResourceKind:
        entries = []
        for resource in document.list_resources(kind):
            payload = copy.deepcopy(resource.payload)
            for slot in iter_slots(kind, payload):
                slot.set(renumber(slot.target, slot.get()))
            entries.append(payload)
        collections[kind] = entries

    nodes = []
    for node in document.list_nodes():
        raw = copy.deepcopy(node.payload)
        for slot in iter_node_slots(raw):
            slot.set(renumber(slot.target, slot.get()))
        if node.name is not None:
            raw["name"] = node.name
        if node.children:
            raw["children"] = [renumber(NODES, child) for child in node.children]
        for kind, index in node.attachments():
            if kind is ResourceKind.LIGHT:
                extensions = raw.setdefault("extensions", {})
                extensions[LIGHTS_EXTENSION] = {"light": renumber(kind.value, index)}
            else:
                raw[kind.name.lower()] = renumber(kind.value, index)
        nodes.append(raw)

    scenes = []
    for scene in document.scenes:
        raw = copy.deepcopy(scene.payload)
        if scene.name is not None:
            raw["name"] = scene.name
        raw["nodes"] = [renumber(NODES, root) for root in scene.nodes]
        scenes.append(raw)

    if scenes:
        data["scenes"] = scenes
    if nodes:
        data["nodes"] = nodes
    for kind, entries in collections.items():
        if kind is not ResourceKind.LIGHT and entries:
            data[kind.value] = entries

    lights = collections[ResourceKind.LIGHT]
    if lights:
        data.setdefault("extensions", {})[LIGHTS_EXTENSION] = {"lights": lights}
    else:
        for key in ("extensionsUsed", "extensionsRequired"):
            if LIGHTS_EXTENSION in data.get(key, []):
                data[key] = [name for name in data[key] if name != LIGHTS_EXTENSION]
                if not data[key]:
                    del data[key]

    return data


def _keeps_binary_chunk(document: Document) -> bool:
    """The GLB BIN chunk backs the (first) buffer that has no URI."""
    buffers = document.list_resources(ResourceKind.BUFFER)
    return bool(document.binary_blob) and any("uri" not in b.payload for b in buffers)


def write_document(document: Document, path: str | Path) -> Path:
    """
    Write a Document to .glb or .gltf (chosen by suffix).

    Raises:
        EncodeError: serialization or the write itself failed.
    """
    path = Path(path)
    data = document_to_json(document)
    try:
        gltf = GLTF2.from_json(json.dumps(data), infer_missing=True)
        if _keeps_binary_chunk(document):
            gltf.set_binary_blob(document.binary_blob)
            if path.suffix.lower() == ".gltf":
                gltf.convert_buffers(BufferFormat.DATAURI)
        path.parent.mkdir(parents=True, exist_ok=True)
        gltf.save(str(path))
    except OSError as e:
        raise EncodeError(f"Failed to write {path}: {e}") from e
    return path
