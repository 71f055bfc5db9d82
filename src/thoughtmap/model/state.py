"""
Mind Map View-Model
===================
The observable store the scene reads from and writes positions back to.

Why is this file needed?
------------------------
1. State Management: it holds the thoughts, the connections and the current
   selection of the open map in one place.
2. Decoupling: the scene never owns domain data. It listens to the signals
   below and calls update_position() while a node is being dragged.

Classes:
    MindMapViewModel: QObject with change signals.
"""
from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Optional, Sequence, Union

from PySide6.QtCore import QObject, QPointF, Signal

from thoughtmap.model.entities import Connection, Thought, ThoughtCategory

logger = logging.getLogger(__name__)

PositionLike = Union[QPointF, Sequence[float]]


def _as_xy(position: PositionLike) -> tuple[float, float]:
    if isinstance(position, QPointF):
        return float(position.x()), float(position.y())
    x, y = position
    return float(x), float(y)


class MindMapViewModel(QObject):
    """Central store with signals for scene sync."""
    thoughts_changed = Signal()
    connections_changed = Signal()
    selection_changed = Signal(object)
    position_changed = Signal(object)

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._thoughts: dict[uuid.UUID, Thought] = {}
        self._connections: dict[uuid.UUID, Connection] = {}
        self._selected_thought: Optional[Thought] = None

    # ------------------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------------------

    @property
    def thoughts(self) -> list[Thought]:
        return list(self._thoughts.values())

    @property
    def connections(self) -> list[Connection]:
        return list(self._connections.values())

    def thought(self, thought_id: uuid.UUID) -> Optional[Thought]:
        return self._thoughts.get(thought_id)

    def connections_for(self, thought: Thought) -> list[Connection]:
        return [
            c for c in self._connections.values()
            if thought.id in (c.source_id, c.target_id)
        ]

    # ------------------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------------------

    @property
    def selected_thought(self) -> Optional[Thought]:
        return self._selected_thought

    @selected_thought.setter
    def selected_thought(self, thought: Optional[Thought]) -> None:
        if thought is not None and thought.id not in self._thoughts:
            raise ValueError(f"Thought {thought.id} is not part of this map.")
        if thought == self._selected_thought:
            return
        self._selected_thought = thought
        self.selection_changed.emit(thought)

    # ------------------------------------------------------------------------------
    # Thoughts
    # ------------------------------------------------------------------------------

    def add_thought(
        self,
        content: str,
        category: ThoughtCategory = ThoughtCategory.IDEA,
        position: PositionLike | None = None,
    ) -> Thought:
        content = content.strip()
        if not content:
            raise ValueError("A thought needs some content.")

        thought = Thought(content=content, category=category)
        if position is not None:
            thought.position_x, thought.position_y = _as_xy(position)

        self._thoughts[thought.id] = thought
        logger.debug(f"Added thought {thought.id} ({category.value}).")
        self.thoughts_changed.emit()
        return thought

    def update_thought(
        self,
        thought: Thought,
        content: Optional[str] = None,
        category: Optional[ThoughtCategory] = None,
    ) -> None:
        stored = self._require(thought)
        if content is not None:
            content = content.strip()
            if not content:
                raise ValueError("A thought needs some content.")
            stored.content = content
        if category is not None:
            stored.category = category
        stored.updated_at = datetime.now()
        self.thoughts_changed.emit()

    def update_position(self, thought: Thought, position: PositionLike) -> None:
        """
        Store a new position for a thought.

        Called continuously while a node is dragged, so it only emits
        position_changed; a full thoughts_changed here would resync the scene
        on every pointer move.
        """
        stored = self._require(thought)
        stored.position_x, stored.position_y = _as_xy(position)
        stored.updated_at = datetime.now()
        self.position_changed.emit(stored)

    def remove_thought(self, thought: Thought) -> None:
        stored = self._require(thought)
        del self._thoughts[stored.id]

        # Connections survive their endpoints, they just lose the reference
        touched = False
        for connection in self._connections.values():
            if connection.source_id == stored.id:
                connection.source_thought = None
                touched = True
            if connection.target_id == stored.id:
                connection.target_thought = None
                touched = True

        if self._selected_thought is not None and self._selected_thought.id == stored.id:
            self.selected_thought = None

        logger.debug(f"Removed thought {stored.id}.")
        self.thoughts_changed.emit()
        if touched:
            self.connections_changed.emit()

    # ------------------------------------------------------------------------------
    # Connections
    # ------------------------------------------------------------------------------

    def add_connection(self, source: Thought, target: Thought, strength: float = 0.5) -> Connection:
        source = self._require(source)
        target = self._require(target)
        if source.id == target.id:
            raise ValueError("A thought cannot be connected to itself.")
        if any(c.links(source, target) for c in self._connections.values()):
            raise ValueError("These thoughts are already connected.")

        connection = Connection(source_thought=source, target_thought=target, strength=strength)
        self._connections[connection.id] = connection
        logger.debug(f"Connected {source.id} -> {target.id} (strength {strength:.2f}).")
        self.connections_changed.emit()
        return connection

    def remove_connection(self, connection: Connection) -> None:
        if connection.id not in self._connections:
            raise KeyError(f"Connection {connection.id} not found.")
        del self._connections[connection.id]
        self.connections_changed.emit()

    def clear(self) -> None:
        """Drop every thought and connection."""
        self._thoughts.clear()
        self._connections.clear()
        self.selected_thought = None
        logger.info("Mind map has been cleared.")
        self.thoughts_changed.emit()
        self.connections_changed.emit()

    # ------------------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------------------

    def _require(self, thought: Thought) -> Thought:
        try:
            return self._thoughts[thought.id]
        except KeyError:
            raise KeyError(f"Thought {thought.id} not found.") from None
