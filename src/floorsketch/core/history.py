from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .model import Polygon, Vertex

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Snapshot:
    """Immutable copy of the drawing state handed to undo/redo collaborators."""

    open_path: Tuple[Vertex, ...] = ()
    polygons: Tuple[Polygon, ...] = ()
    description: str = ""


class SnapshotHistory:
    """Linear undo/redo stack of :class:`Snapshot` objects.

    The drawing engine never records history on its own; the caller saves a
    snapshot after every committed mutation and restores whatever
    :meth:`undo` or :meth:`redo` hands back.
    """

    def __init__(self, max_size: int = 50) -> None:
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.max_size = max_size
        self._entries: List[Snapshot] = []
        self._index = -1

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def current(self) -> Optional[Snapshot]:
        if self._index < 0:
            return None
        return self._entries[self._index]

    @property
    def can_undo(self) -> bool:
        return self._index > 0

    @property
    def can_redo(self) -> bool:
        return self._index < len(self._entries) - 1

    def save(self, snapshot: Snapshot, description: str = "") -> None:
        if description:
            snapshot = Snapshot(snapshot.open_path, snapshot.polygons, description)
        # drop the redo branch
        del self._entries[self._index + 1:]
        self._entries.append(snapshot)
        if len(self._entries) > self.max_size:
            self._entries.pop(0)
        self._index = len(self._entries) - 1
        logger.debug(f"Saved state '{snapshot.description}' (index {self._index}, total {len(self._entries)})")

    def undo(self) -> Optional[Snapshot]:
        if not self.can_undo:
            logger.debug("Cannot undo - at beginning of history")
            return None
        self._index -= 1
        return self._entries[self._index]

    def redo(self) -> Optional[Snapshot]:
        if not self.can_redo:
            logger.debug("Cannot redo - at end of history")
            return None
        self._index += 1
        return self._entries[self._index]

    def clear(self) -> None:
        self._entries.clear()
        self._index = -1
