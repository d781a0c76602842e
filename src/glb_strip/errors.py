"""Exception hierarchy for glb-strip."""


class GlbStripError(Exception):
    """Base class for every error raised by glb-strip."""


class DecodeError(GlbStripError):
    """A file could not be parsed into a Document."""


class EncodeError(GlbStripError):
    """A Document could not be serialized back to disk."""


class PipelineError(GlbStripError):
    """A cleaning stage failed. `stage` names the stage that raised."""

    def __init__(self, message: str, stage: str | None = None) -> None:
        super().__init__(message)
        self.stage = stage

    def __str__(self) -> str:
        message = super().__str__()
        if self.stage:
            return f"[{self.stage}] {message}"
        return message


class InvariantViolation(PipelineError):
    """The scene graph breaks the single-parent / no-dangling-reference rules."""


class ResourceCollectionError(PipelineError):
    """Reachability analysis over the resource graph could not complete."""
