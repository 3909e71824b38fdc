from dataclasses import dataclass


class C4ViewError(Exception):
    """Base class for errors raised to callers of the viewer core."""


class ContainerNotFoundError(C4ViewError, LookupError):
    """The mount point passed to init/load does not exist."""

    def __init__(self, container: str):
        super().__init__(f"Container not found: {container}")
        self.container = container


class UnknownScopeError(C4ViewError, LookupError):
    """A projection scope names no system or container in the document."""


@dataclass
class BuildIssue:
    level: str  # edge | node | surface
    message: str
    object_id: str
