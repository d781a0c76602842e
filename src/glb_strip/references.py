"""
Reference slots for every glTF collection the document model tracks.

Every place a glTF object points at another top-level object (an accessor, a
material, a node, ...) is exposed as a `Slot`. The same table drives edge
discovery for reachability and index renumbering on export, so the two can
never disagree about where references live.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Any

from glb_strip.utils.constants import (
    DRACO_EXTENSION,
    GPU_INSTANCING_EXTENSION,
    MATERIAL_VARIANTS_EXTENSION,
    MESHOPT_EXTENSIONS,
)


class ResourceKind(str, Enum):
    """Shared resource collections, valued by their glTF JSON key."""

    MESH = "meshes"
    MATERIAL = "materials"
    TEXTURE = "textures"
    IMAGE = "images"
    SAMPLER = "samplers"
    ACCESSOR = "accessors"
    BUFFER_VIEW = "bufferViews"
    BUFFER = "buffers"
    CAMERA = "cameras"
    LIGHT = "lights"
    SKIN = "skins"
    ANIMATION = "animations"


# Pseudo-kind for references that point back into the node arena
NODES = "nodes"


@dataclass(frozen=True)
class Slot:
    """A mutable location inside a payload holding an index into `target`."""

    container: Any
    key: Any
    target: str

    def get(self) -> int:
        return self.container[self.key]

    def set(self, value: int) -> None:
        self.container[self.key] = value


def _slot(container: Any, key: str, target: str) -> Iterator[Slot]:
    if isinstance(container, dict) and isinstance(container.get(key), int):
        yield Slot(container, key, target)


def _dicts(value: Any) -> list[dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def _extensions(payload: dict[str, Any]) -> dict[str, Any]:
    extensions = payload.get("extensions")
    return extensions if isinstance(extensions, dict) else {}


def _mesh_slots(payload: dict[str, Any]) -> Iterator[Slot]:
    accessors = ResourceKind.ACCESSOR.value
    for primitive in _dicts(payload.get("primitives")):
        attributes = primitive.get("attributes")
        if isinstance(attributes, dict):
            for name in attributes:
                yield from _slot(attributes, name, accessors)
        yield from _slot(primitive, "indices", accessors)
        yield from _slot(primitive, "material", ResourceKind.MATERIAL.value)
        for target in _dicts(primitive.get("targets")):
            for name in target:
                yield from _slot(target, name, accessors)

        extensions = _extensions(primitive)
        yield from _slot(
            extensions.get(DRACO_EXTENSION), "bufferView", ResourceKind.BUFFER_VIEW.value
        )
        variants = extensions.get(MATERIAL_VARIANTS_EXTENSION)
        if isinstance(variants, dict):
            for mapping in _dicts(variants.get("mappings")):
                yield from _slot(mapping, "material", ResourceKind.MATERIAL.value)


def _texture_infos(value: Any) -> Iterator[Slot]:
    """Find every `*Texture: {"index": n}` texture-info, extensions included."""
    if isinstance(value, dict):
        for key, item in value.items():
            if key.endswith("Texture"):
                yield from _slot(item, "index", ResourceKind.TEXTURE.value)
            yield from _texture_infos(item)
    elif isinstance(value, list):
        for item in value:
            yield from _texture_infos(item)


def _material_slots(payload: dict[str, Any]) -> Iterator[Slot]:
    yield from _texture_infos(payload)


def _texture_slots(payload: dict[str, Any]) -> Iterator[Slot]:
    yield from _slot(payload, "source", ResourceKind.IMAGE.value)
    yield from _slot(payload, "sampler", ResourceKind.SAMPLER.value)
    # EXT_texture_webp, KHR_texture_basisu, MSFT_texture_dds
    for extension in _extensions(payload).values():
        yield from _slot(extension, "source", ResourceKind.IMAGE.value)


def _image_slots(payload: dict[str, Any]) -> Iterator[Slot]:
    yield from _slot(payload, "bufferView", ResourceKind.BUFFER_VIEW.value)


def _accessor_slots(payload: dict[str, Any]) -> Iterator[Slot]:
    buffer_views = ResourceKind.BUFFER_VIEW.value
    yield from _slot(payload, "bufferView", buffer_views)
    sparse = payload.get("sparse")
    if isinstance(sparse, dict):
        yield from _slot(sparse.get("indices"), "bufferView", buffer_views)
        yield from _slot(sparse.get("values"), "bufferView", buffer_views)


def _buffer_view_slots(payload: dict[str, Any]) -> Iterator[Slot]:
    yield from _slot(payload, "buffer", ResourceKind.BUFFER.value)
    extensions = _extensions(payload)
    for name in MESHOPT_EXTENSIONS:
        yield from _slot(extensions.get(name), "buffer", ResourceKind.BUFFER.value)


def _skin_slots(payload: dict[str, Any]) -> Iterator[Slot]:
    yield from _slot(payload, "inverseBindMatrices", ResourceKind.ACCESSOR.value)
    joints = payload.get("joints")
    if isinstance(joints, list):
        for i, joint in enumerate(joints):
            if isinstance(joint, int):
                yield Slot(joints, i, NODES)
    yield from _slot(payload, "skeleton", NODES)


def _animation_slots(payload: dict[str, Any]) -> Iterator[Slot]:
    for sampler in _dicts(payload.get("samplers")):
        yield from _slot(sampler, "input", ResourceKind.ACCESSOR.value)
        yield from _slot(sampler, "output", ResourceKind.ACCESSOR.value)
    for channel in _dicts(payload.get("channels")):
        yield from _slot(channel.get("target"), "node", NODES)


def _no_slots(payload: dict[str, Any]) -> Iterator[Slot]:
    return iter(())


_SLOT_READERS: dict[ResourceKind, Callable[[dict[str, Any]], Iterator[Slot]]] = {
    ResourceKind.MESH: _mesh_slots,
    ResourceKind.MATERIAL: _material_slots,
    ResourceKind.TEXTURE: _texture_slots,
    ResourceKind.IMAGE: _image_slots,
    ResourceKind.SAMPLER: _no_slots,
    ResourceKind.ACCESSOR: _accessor_slots,
    ResourceKind.BUFFER_VIEW: _buffer_view_slots,
    ResourceKind.BUFFER: _no_slots,
    ResourceKind.CAMERA: _no_slots,
    ResourceKind.LIGHT: _no_slots,
    ResourceKind.SKIN: _skin_slots,
    ResourceKind.ANIMATION: _animation_slots,
}


def iter_slots(kind: ResourceKind, payload: dict[str, Any]) -> Iterator[Slot]:
    """Yield every outgoing reference slot of a resource payload."""
    return _SLOT_READERS[kind](payload)


def iter_node_slots(payload: dict[str, Any]) -> Iterator[Slot]:
    """
    Yield reference slots left in a node payload.

    mesh, camera, skin and the punctual light are lifted into Node fields;
    what remains are extension references such as per-instance accessors.
    """
    instancing = _extensions(payload).get(GPU_INSTANCING_EXTENSION)
    if isinstance(instancing, dict):
        attributes = instancing.get("attributes")
        if isinstance(attributes, dict):
            for name in attributes:
                yield from _slot(attributes, name, ResourceKind.ACCESSOR.value)
