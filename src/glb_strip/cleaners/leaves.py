"""Empty leaf node pruning."""

from dataclasses import dataclass

from glb_strip.document import Document, Node


@dataclass
class PruneStats:
    """Outcome of a prune_empty_leaves() run."""

    removed: int = 0
    passes: int = 0


def is_empty_leaf(node: Node) -> bool:
    """A node with no children and no mesh, camera or light attachment."""
    if node.children:
        return False
    if node.mesh is not None:
        return False
    if node.camera is not None:
        return False
    if node.light is not None:
        return False
    return True


def prune_empty_leaves(document: Document) -> PruneStats:
    """
    Remove empty leaf nodes until none are left.

    Removing a leaf can turn its parent into an empty leaf, and the node list
    has no parent/child ordering, so full passes repeat until one removes
    nothing. Every pass that changes something shrinks the live node count,
    which bounds the loop.

    Raises:
        InvariantViolation: a node's parent does not list it as a child.
    """
    stats = PruneStats()
    changed = True
    while changed:
        changed = False
        stats.passes += 1
        for node in document.list_nodes():
            if node.disposed:
                continue
            if not is_empty_leaf(node):
                continue
            stats.removed += document.dispose_node(node)
            changed = True
    return stats
