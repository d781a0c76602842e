"""
Pytest fixtures for glb-strip tests.

Documents are built in memory through the Document builders; the
`sample_glb` fixture writes a real GLB through pygltflib for codec and batch
tests.
"""

from __future__ import annotations

import struct
from collections.abc import Callable
from pathlib import Path

import pygltflib
import pytest

from glb_strip.document import Document, Node, Resource
from glb_strip.references import ResourceKind

MeshChain = dict[str, Resource]


def _build_mesh_chain(document: Document, name: str = "Mesh") -> MeshChain:
    """Mesh -> material -> texture -> image/sampler, accessor -> view -> buffer."""
    buffer = document.add_resource(ResourceKind.BUFFER, {"byteLength": 64})
    vertex_view = document.add_resource(
        ResourceKind.BUFFER_VIEW, {"buffer": buffer.handle, "byteLength": 36}
    )
    image_view = document.add_resource(
        ResourceKind.BUFFER_VIEW,
        {"buffer": buffer.handle, "byteOffset": 36, "byteLength": 28},
    )
    accessor = document.add_resource(
        ResourceKind.ACCESSOR,
        {"bufferView": vertex_view.handle, "componentType": 5126, "count": 3, "type": "VEC3"},
    )
    image = document.add_resource(
        ResourceKind.IMAGE, {"bufferView": image_view.handle, "mimeType": "image/png"}
    )
    sampler = document.add_resource(ResourceKind.SAMPLER, {})
    texture = document.add_resource(
        ResourceKind.TEXTURE, {"source": image.handle, "sampler": sampler.handle}
    )
    material = document.add_resource(
        ResourceKind.MATERIAL,
        {
            "name": f"{name}Material",
            "pbrMetallicRoughness": {"baseColorTexture": {"index": texture.handle}},
        },
    )
    mesh = document.add_resource(
        ResourceKind.MESH,
        {
            "name": name,
            "primitives": [
                {"attributes": {"POSITION": accessor.handle}, "material": material.handle}
            ],
        },
    )
    return {
        "buffer": buffer,
        "vertex_view": vertex_view,
        "image_view": image_view,
        "accessor": accessor,
        "image": image,
        "sampler": sampler,
        "texture": texture,
        "material": material,
        "mesh": mesh,
    }


@pytest.fixture
def document() -> Document:
    """An empty document with no scenes."""
    return Document()


@pytest.fixture
def mesh_chain() -> Callable[..., MeshChain]:
    """Factory adding a fully referenced mesh resource chain to a document."""
    return _build_mesh_chain


@pytest.fixture
def camera_scene() -> tuple[Document, dict[str, Node], MeshChain, Resource]:
    """
    S = [A(camera=C1, children=[B(mesh=M1), C()])]

    Returns (document, nodes by name, M1's resource chain, C1).
    """
    document = Document()
    chain = _build_mesh_chain(document, "M1")
    camera = document.add_resource(
        ResourceKind.CAMERA, {"type": "perspective", "perspective": {"yfov": 0.8, "znear": 0.1}}
    )
    scene = document.add_scene("S")
    a = document.add_node("A", scene=scene, camera=camera.handle)
    b = document.add_node("B", parent=a, mesh=chain["mesh"].handle)
    c = document.add_node("C", parent=a)
    return document, {"A": a, "B": b, "C": c}, chain, camera


def _write_sample_glb(path: Path) -> Path:
    """
    Write a GLB with one triangle mesh, a camera and a punctual light.

    nodes: 0 Root(children=[1, 2, 3]), 1 Triangle(mesh), 2 Camera(camera),
           3 Lamp(light), 4 Orphan()
    """
    positions = struct.pack("<9f", 0, 0, 0, 1, 0, 0, 0, 1, 0)
    gltf = pygltflib.GLTF2(
        scene=0,
        scenes=[pygltflib.Scene(name="Scene", nodes=[0])],
        nodes=[
            pygltflib.Node(name="Root", children=[1, 2, 3]),
            pygltflib.Node(name="Triangle", mesh=0),
            pygltflib.Node(name="Camera", camera=0),
            pygltflib.Node(
                name="Lamp", extensions={"KHR_lights_punctual": {"light": 0}}
            ),
            pygltflib.Node(name="Orphan"),
        ],
        meshes=[
            pygltflib.Mesh(
                name="Triangle",
                primitives=[pygltflib.Primitive(attributes=pygltflib.Attributes(POSITION=0))],
            )
        ],
        cameras=[
            pygltflib.Camera(
                type="perspective",
                perspective=pygltflib.Perspective(yfov=0.8, znear=0.1),
            )
        ],
        accessors=[
            pygltflib.Accessor(
                bufferView=0,
                componentType=pygltflib.FLOAT,
                count=3,
                type=pygltflib.VEC3,
                max=[1.0, 1.0, 0.0],
                min=[0.0, 0.0, 0.0],
            )
        ],
        bufferViews=[
            pygltflib.BufferView(
                buffer=0, byteLength=len(positions), target=pygltflib.ARRAY_BUFFER
            )
        ],
        buffers=[pygltflib.Buffer(byteLength=len(positions))],
        extensionsUsed=["KHR_lights_punctual"],
        extensions={"KHR_lights_punctual": {"lights": [{"type": "point", "intensity": 2.0}]}},
    )
    gltf.set_binary_blob(positions)
    path.parent.mkdir(parents=True, exist_ok=True)
    gltf.save(str(path))
    return path


@pytest.fixture
def sample_glb() -> Callable[[Path], Path]:
    """Factory writing the sample GLB to a given path."""
    return _write_sample_glb
