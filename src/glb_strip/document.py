"""
Mutable scene-graph document model.

Nodes live in an arena and are addressed by stable integer handles (their
arena index). Children are owned handle lists, `parent` is a plain
back-reference handle. Top-level nodes have `parent=None`; their parent
context is whichever Scene lists them.

Shared resources live in a pool keyed by `ResourceKind`. A resource keeps its
glTF JSON object as `payload`; outgoing references are read from the payload
on demand, so reachability always reflects the current graph.

Disposed nodes and resources keep their slot (handles are never reused) but
are flagged and excluded from every listing.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from glb_strip.errors import InvariantViolation
from glb_strip.references import NODES, ResourceKind, Slot, iter_node_slots, iter_slots


@dataclass(eq=False)
class Node:
    """A scene-graph node with its capability attachments."""

    handle: int
    name: str | None = None
    children: list[int] = field(default_factory=list)
    parent: int | None = None
    mesh: int | None = None
    camera: int | None = None
    light: int | None = None
    skin: int | None = None
    payload: dict[str, Any] = field(default_factory=dict)
    disposed: bool = False

    def attachments(self) -> Iterator[tuple[ResourceKind, int]]:
        """Yield (kind, index) for every resource attached to this node."""
        for kind, index in (
            (ResourceKind.MESH, self.mesh),
            (ResourceKind.CAMERA, self.camera),
            (ResourceKind.LIGHT, self.light),
            (ResourceKind.SKIN, self.skin),
        ):
            if index is not None:
                yield kind, index

    def slots(self) -> Iterator[Slot]:
        """Extension references kept in the payload (e.g. instancing accessors)."""
        return iter_node_slots(self.payload)


@dataclass(eq=False)
class Scene:
    """An ordered list of root node handles."""

    handle: int
    name: str | None = None
    nodes: list[int] = field(default_factory=list)
    payload: dict[str, Any] = field(default_factory=dict)


@dataclass(eq=False)
class Resource:
    """A shared asset in the resource pool."""

    kind: ResourceKind
    handle: int
    payload: dict[str, Any] = field(default_factory=dict)
    disposed: bool = False

    @property
    def name(self) -> str | None:
        return self.payload.get("name")

    def slots(self) -> Iterator[Slot]:
        return iter_slots(self.kind, self.payload)

    def references(self) -> list[tuple[str, int]]:
        """Outgoing references as (target collection, index) pairs."""
        return [(slot.target, slot.get()) for slot in self.slots()]


class Document:
    """Scenes, the node arena and the shared resource pool of one glTF asset."""

    def __init__(
        self,
        root: dict[str, Any] | None = None,
        binary_blob: bytes | None = None,
    ) -> None:
        # Root-level glTF fields not modelled elsewhere (asset, scene, extensions...)
        self.root: dict[str, Any] = root if root is not None else {"asset": {"version": "2.0"}}
        self.binary_blob = binary_blob
        self.nodes: list[Node] = []
        self.scenes: list[Scene] = []
        self.pool: dict[ResourceKind, list[Resource]] = {kind: [] for kind in ResourceKind}

    # ------------------------------------------------------------------
    # Builders
    # ------------------------------------------------------------------

    def add_scene(self, name: str | None = None, payload: dict[str, Any] | None = None) -> Scene:
        scene = Scene(handle=len(self.scenes), name=name, payload=payload or {})
        self.scenes.append(scene)
        return scene

    def add_node(
        self,
        name: str | None = None,
        *,
        parent: Node | None = None,
        scene: Scene | None = None,
        mesh: int | None = None,
        camera: int | None = None,
        light: int | None = None,
        skin: int | None = None,
        payload: dict[str, Any] | None = None,
    ) -> Node:
        """Append a node, optionally linking it under `parent` or into `scene`."""
        node = Node(
            handle=len(self.nodes),
            name=name,
            mesh=mesh,
            camera=camera,
            light=light,
            skin=skin,
            payload=payload or {},
        )
        self.nodes.append(node)
        if parent is not None:
            parent.children.append(node.handle)
            node.parent = parent.handle
        if scene is not None:
            scene.nodes.append(node.handle)
        return node

    def add_resource(self, kind: ResourceKind, payload: dict[str, Any] | None = None) -> Resource:
        entries = self.pool[kind]
        resource = Resource(kind=kind, handle=len(entries), payload=payload or {})
        entries.append(resource)
        return resource

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    def node(self, handle: int) -> Node:
        if not 0 <= handle < len(self.nodes):
            raise InvariantViolation(f"node handle {handle} is out of range")
        return self.nodes[handle]

    def scene(self, handle: int) -> Scene:
        return self.scenes[handle]

    def resource(self, kind: ResourceKind, index: int) -> Resource:
        """Look up a pooled resource. Raises IndexError for unknown indices."""
        if index < 0:
            raise IndexError(f"{kind.value}[{index}] is out of range")
        return self.pool[kind][index]

    def list_nodes(self) -> list[Node]:
        """Snapshot of every live node, in handle order."""
        return [node for node in self.nodes if not node.disposed]

    def list_resources(self, kind: ResourceKind | None = None) -> list[Resource]:
        """Snapshot of live resources of one kind, or of every kind."""
        kinds = [kind] if kind is not None else list(ResourceKind)
        return [r for k in kinds for r in self.pool[k] if not r.disposed]

    def stats(self) -> dict[str, int]:
        """Live entity counts, keyed by glTF collection name."""
        counts = {NODES: len(self.list_nodes())}
        for kind in ResourceKind:
            counts[kind.value] = len(self.list_resources(kind))
        return counts

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def detach_node(self, node: Node) -> None:
        """Unlink a node from its parent node, or from every scene listing it."""
        if node.parent is not None:
            parent = self.node(node.parent)
            if parent.disposed or node.handle not in parent.children:
                raise InvariantViolation(
                    f"node {node.handle} claims parent {parent.handle}, "
                    "which does not list it as a child"
                )
            parent.children.remove(node.handle)
            node.parent = None
            return

        for scene in self.scenes:
            if node.handle in scene.nodes:
                scene.nodes[:] = [h for h in scene.nodes if h != node.handle]

    def dispose_node(self, node: Node) -> int:
        """
        Detach and dispose a node together with its whole subtree.

        References held by skins (joints, skeleton) and animation channels
        targeting a disposed node are removed. Returns the number of nodes
        disposed.
        """
        if node.disposed:
            raise InvariantViolation(f"node {node.handle} is already disposed")

        # Pre-order walk; disposing in reverse keeps every parent live while
        # its children are detached from it.
        order: list[Node] = []
        seen: set[int] = set()
        stack = [node]
        while stack:
            current = stack.pop()
            if current.handle in seen:
                raise InvariantViolation(f"node {current.handle} is its own ancestor")
            seen.add(current.handle)
            order.append(current)
            stack.extend(self.node(child) for child in reversed(current.children))

        for current in reversed(order):
            self.detach_node(current)
            current.disposed = True
            self._scrub_node_references(current.handle)
        return len(order)

    def dispose_resource(self, resource: Resource) -> None:
        resource.disposed = True

    def _scrub_node_references(self, handle: int) -> None:
        """
        Drop skin joints, skeletons and animation channels naming `handle`.

        A skin whose last joint goes is detached from every node using it, since
        glTF requires at least one joint; the collector then disposes it.
        """
        for skin in self.list_resources(ResourceKind.SKIN):
            payload = skin.payload
            joints = payload.get("joints")
            if isinstance(joints, list) and handle in joints:
                payload["joints"] = [joint for joint in joints if joint != handle]
                if not payload["joints"]:
                    for node in self.list_nodes():
                        if node.skin == skin.handle:
                            node.skin = None
            if payload.get("skeleton") == handle:
                del payload["skeleton"]

        for animation in self.list_resources(ResourceKind.ANIMATION):
            channels = animation.payload.get("channels")
            if not isinstance(channels, list):
                continue
            kept = [c for c in channels if _channel_target(c) != handle]
            if len(kept) != len(channels):
                animation.payload["channels"] = kept
                _drop_unused_samplers(animation.payload)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def check_invariants(self) -> None:
        """Fail fast on a malformed graph. Never repairs anything."""
        owners: dict[int, int] = {}
        for node in self.list_nodes():
            for child in node.children:
                target = self._live_node(child, f"child of node {node.handle}")
                if child in owners:
                    raise InvariantViolation(
                        f"node {child} is a child of both node {owners[child]} "
                        f"and node {node.handle}"
                    )
                owners[child] = node.handle
                if target.parent != node.handle:
                    raise InvariantViolation(
                        f"node {child} is listed by node {node.handle} "
                        f"but its parent is {target.parent}"
                    )

        for node in self.list_nodes():
            if node.parent is not None and owners.get(node.handle) != node.parent:
                raise InvariantViolation(
                    f"node {node.handle} claims parent {node.parent}, "
                    "which does not list it as a child"
                )
            for kind, index in node.attachments():
                self._live_resource(kind, index, f"attached to node {node.handle}")
            for slot in node.slots():
                self._live_resource(
                    ResourceKind(slot.target), slot.get(), f"referenced by node {node.handle}"
                )

        for scene in self.scenes:
            for root in scene.nodes:
                target = self._live_node(root, f"root of scene {scene.handle}")
                if target.parent is not None:
                    raise InvariantViolation(
                        f"scene {scene.handle} lists node {root}, "
                        f"which is also a child of node {target.parent}"
                    )

        self._check_acyclic()

        for resource in self.list_resources():
            context = f"referenced by {resource.kind.value}[{resource.handle}]"
            for target, index in resource.references():
                if target == NODES:
                    self._live_node(index, context)
                else:
                    self._live_resource(ResourceKind(target), index, context)

    def _check_acyclic(self) -> None:
        rooted: set[int] = set()
        for node in self.list_nodes():
            chain: list[int] = []
            current: Node | None = node
            while current is not None and current.handle not in rooted:
                if current.handle in chain:
                    raise InvariantViolation(f"node {current.handle} is its own ancestor")
                chain.append(current.handle)
                current = self.node(current.parent) if current.parent is not None else None
            rooted.update(chain)

    def _live_node(self, handle: int, context: str) -> Node:
        if not 0 <= handle < len(self.nodes):
            raise InvariantViolation(f"node {handle} ({context}) does not exist")
        node = self.nodes[handle]
        if node.disposed:
            raise InvariantViolation(f"node {handle} ({context}) is disposed")
        return node

    def _live_resource(self, kind: ResourceKind, index: int, context: str) -> Resource:
        if not 0 <= index < len(self.pool[kind]):
            raise InvariantViolation(f"{kind.value}[{index}] ({context}) does not exist")
        resource = self.pool[kind][index]
        if resource.disposed:
            raise InvariantViolation(f"{kind.value}[{index}] ({context}) is disposed")
        return resource


def _channel_target(channel: Any) -> int | None:
    if not isinstance(channel, dict):
        return None
    target = channel.get("target")
    if not isinstance(target, dict):
        return None
    return target.get("node")


def _drop_unused_samplers(animation: dict[str, Any]) -> None:
    """Remove samplers no channel uses and renumber channel sampler indices."""
    samplers = animation.get("samplers")
    channels = animation.get("channels", [])
    if not isinstance(samplers, list):
        return
    used = sorted(
        {
            c["sampler"]
            for c in channels
            if isinstance(c, dict)
            and isinstance(c.get("sampler"), int)
            and 0 <= c["sampler"] < len(samplers)
        }
    )
    remap = {old: new for new, old in enumerate(used)}
    animation["samplers"] = [samplers[i] for i in used]
    for channel in channels:
        if isinstance(channel, dict) and channel.get("sampler") in remap:
            channel["sampler"] = remap[channel["sampler"]]
