# /core/exceptions.py

class LayoutError(ValueError):
    """Raised when a caller breaks the layout engine's contract."""


class DanglingEdgeError(LayoutError):
    """An edge references a node id that is not part of the snapshot."""
    def __init__(self, source: str, target: str, missing: str):
        super().__init__(f"Edge {source} -> {target} references unknown node '{missing}'.")
        self.source = source
        self.target = target
        self.missing = missing


class UnknownNodeError(LayoutError):
    """A node id passed to pin/unpin/select does not exist."""
    def __init__(self, node_id: str):
        super().__init__(f"Unknown node id '{node_id}'.")
        self.node_id = node_id


class InvalidStepError(LayoutError):
    """A tick or reheat was requested with an out-of-range value."""


class NoGraphLoadedError(LookupError):
    """The session has no dataset to build a graph from."""


class StreamInProgressError(RuntimeError):
    """The current layout is already being advanced by a stream."""
