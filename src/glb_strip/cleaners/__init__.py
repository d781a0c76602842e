"""Scene-graph cleaners: capability stripping, leaf pruning, resource collection."""

from glb_strip.cleaners.capabilities import strip_capabilities
from glb_strip.cleaners.leaves import PruneStats, is_empty_leaf, prune_empty_leaves
from glb_strip.cleaners.resources import (
    CollectStats,
    collect_resources,
    reachable_nodes,
    reachable_resources,
)

__all__ = [
    "CollectStats",
    "PruneStats",
    "collect_resources",
    "is_empty_leaf",
    "prune_empty_leaves",
    "reachable_nodes",
    "reachable_resources",
    "strip_capabilities",
]
