"""Checkpointable protocol: collaborators that can undo their own effects."""
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Checkpointable(Protocol):
    """State that the engine snapshots before a call and restores on failure."""

    def checkpoint(self) -> Any: ...

    def rollback(self, state: Any) -> None: ...
