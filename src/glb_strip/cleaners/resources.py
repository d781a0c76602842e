"""Reachability-based garbage collection of nodes and shared resources."""

from dataclasses import dataclass, field

from glb_strip.document import Document, Resource
from glb_strip.errors import ResourceCollectionError
from glb_strip.references import NODES, ResourceKind

ResourceKey = tuple[ResourceKind, int]


@dataclass
class CollectStats:
    """Outcome of a collect_resources() run."""

    nodes: int = 0
    resources: dict[ResourceKind, int] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return sum(self.resources.values())


def reachable_nodes(document: Document) -> set[int]:
    """Handles of every node reachable from a scene root."""
    seen: set[int] = set()
    stack = [handle for scene in document.scenes for handle in scene.nodes]
    while stack:
        handle = stack.pop()
        if handle in seen:
            continue
        seen.add(handle)
        stack.extend(document.node(handle).children)
    return seen


def _lookup(document: Document, target: str, index: int, source: str) -> Resource:
    try:
        kind = ResourceKind(target)
    except ValueError:
        raise ResourceCollectionError(
            f"{source} references unsupported collection '{target}'"
        ) from None
    try:
        resource = document.resource(kind, index)
    except IndexError:
        raise ResourceCollectionError(
            f"{source} references missing {kind.value}[{index}]"
        ) from None
    if resource.disposed:
        raise ResourceCollectionError(
            f"{source} references disposed {kind.value}[{index}]"
        )
    return resource


def reachable_resources(document: Document) -> set[ResourceKey]:
    """
    Mark every resource reachable from the live nodes.

    Roots are node attachments, node extension references (instancing
    accessors) and animations that still drive a live node.
    Edges are followed to full closure (mesh -> material -> texture -> image
    -> bufferView -> buffer, accessors, skins...).
    """
    live = {node.handle for node in document.list_nodes()}
    stack: list[tuple[str, int, str]] = []
    for node in document.list_nodes():
        for kind, index in node.attachments():
            stack.append((kind.value, index, f"node {node.handle}"))
        for slot in node.slots():
            stack.append((slot.target, slot.get(), f"node {node.handle}"))
    for animation in document.list_resources(ResourceKind.ANIMATION):
        if any(t == NODES and i in live for t, i in animation.references()):
            stack.append((ResourceKind.ANIMATION.value, animation.handle, "scene"))

    marked: set[ResourceKey] = set()
    while stack:
        target, index, source = stack.pop()
        resource = _lookup(document, target, index, source)
        key = (resource.kind, resource.handle)
        if key in marked:
            continue
        marked.add(key)
        label = f"{resource.kind.value}[{resource.handle}]"
        for ref_target, ref_index in resource.references():
            if ref_target != NODES:
                stack.append((ref_target, ref_index, label))
    return marked


def collect_resources(document: Document) -> CollectStats:
    """
    Dispose nodes outside every scene, then every unreachable resource.

    Must run on the final tree shape (after leaf pruning).

    Raises:
        ResourceCollectionError: a reference cannot be resolved.
    """
    stats = CollectStats()

    keep = reachable_nodes(document)
    for node in document.list_nodes():
        if node.disposed or node.handle in keep:
            continue
        stats.nodes += document.dispose_node(node)

    marked = reachable_resources(document)
    for resource in document.list_resources():
        if (resource.kind, resource.handle) in marked:
            continue
        document.dispose_resource(resource)
        stats.resources[resource.kind] = stats.resources.get(resource.kind, 0) + 1
    return stats
