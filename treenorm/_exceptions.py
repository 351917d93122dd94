import io


class TNStubOperationError(io.UnsupportedOperation):
    """Raised when a content or mutation operation is invoked on a stub directory entry."""
    def __init__(self, operation: str, path: str) -> None:
        self.operation = operation
        self.path = path
        super().__init__(
            f"'{operation}' is not supported on synthesized directory '{path}'."
        )


class TNOrderingError(OSError):
    """Raised when an entry is materialized before its parent directory. Subclass of OSError."""
    def __init__(self, path: str, parent: str) -> None:
        self.path = path
        self.parent = parent
        super().__init__(
            f"Parent directory '{parent}' does not exist yet for entry '{path}'."
        )


class TNNodeLimitExceededError(OSError):
    """Raised when the node count limit of a memory tree is exceeded. Subclass of OSError."""
    def __init__(self, current: int, limit: int) -> None:
        self.current = current
        self.limit = limit
        super().__init__(
            f"Tree node limit exceeded: current {current} nodes, limit is {limit}."
        )
