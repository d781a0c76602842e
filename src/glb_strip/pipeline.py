"""
Cleaning pipeline for a single document.

    validate -> strip cameras/lights -> prune empty leaves -> collect resources

The pipeline mutates the document in place. It performs no file I/O, starts
no processes and prints nothing; reporting is up to the caller.
"""

from dataclasses import dataclass, field

from glb_strip.cleaners import collect_resources, prune_empty_leaves, strip_capabilities
from glb_strip.document import Document
from glb_strip.errors import PipelineError
from glb_strip.references import ResourceKind


@dataclass
class CleanStats:
    """Counters gathered across pipeline stages."""

    cameras_removed: int = 0
    lights_removed: int = 0
    nodes_pruned: int = 0
    prune_passes: int = 0
    orphan_nodes: int = 0
    resources_disposed: dict[ResourceKind, int] = field(default_factory=dict)

    @property
    def nodes_removed(self) -> int:
        return self.nodes_pruned + self.orphan_nodes

    @property
    def total_resources_disposed(self) -> int:
        return sum(self.resources_disposed.values())


@dataclass
class CleanResult:
    """Outcome of clean(): the mutated document, or the error that stopped it."""

    ok: bool
    document: Document
    stats: CleanStats = field(default_factory=CleanStats)
    error: PipelineError | None = None


def clean(document: Document) -> CleanResult:
    """
    Strip, prune and garbage-collect one document.

    A failing stage aborts the remaining ones. The document is then left
    internally consistent but only partially cleaned, and must not be written.
    """
    stats = CleanStats()
    stage = "validate"
    try:
        document.check_invariants()

        stage = "strip"
        stats.cameras_removed, stats.lights_removed = strip_capabilities(document)

        stage = "prune"
        pruned = prune_empty_leaves(document)
        stats.nodes_pruned = pruned.removed
        stats.prune_passes = pruned.passes

        stage = "collect"
        collected = collect_resources(document)
        stats.orphan_nodes = collected.nodes
        stats.resources_disposed = collected.resources
    except PipelineError as e:
        if e.stage is None:
            e.stage = stage
        return CleanResult(ok=False, document=document, stats=stats, error=e)

    return CleanResult(ok=True, document=document, stats=stats)
