"""Camera and punctual light stripping."""

from glb_strip.document import Document


def strip_capabilities(document: Document) -> tuple[int, int]:
    """
    Detach cameras and punctual lights from every node.

    Applies to unreachable nodes too. The detached Camera/Light resources stay
    in the pool; collect_resources() disposes them once nothing references
    them anymore.

    Returns:
        (cameras_removed, lights_removed)
    """
    cameras = lights = 0
    for node in document.list_nodes():
        if node.camera is not None:
            node.camera = None
            cameras += 1
        if node.light is not None:
            node.light = None
            lights += 1
    return cameras, lights
