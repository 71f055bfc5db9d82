"""
Mind Map Scene
==============
QGraphicsScene that mirrors the view-model as sprites.

Why is this file needed?
------------------------
1. Sync: sync_with_view_model() diffs the model against what is on screen and
   only touches what changed, so positions, running animations, an ongoing
   drag and the camera survive every update.
2. Input: single-touch / left-button events select and drag thought nodes
   and push the new positions back to the view-model.
"""
from __future__ import annotations

import logging
import uuid
from typing import Iterable, Optional, TYPE_CHECKING

from PySide6.QtCore import QPointF, QRectF, QSizeF, Qt, Signal
from PySide6.QtGui import QColor
from PySide6.QtWidgets import QGraphicsScene, QGraphicsSceneMouseEvent

from thoughtmap.config import AppConfig
from thoughtmap.scene.layout import spiral_position
from thoughtmap.scene.reconciler import reconcile
from thoughtmap.view.sprites import ConnectionEdgeSprite, ThoughtNodeSprite

if TYPE_CHECKING:
    from thoughtmap.model.entities import Connection, Thought
    from thoughtmap.model.state import MindMapViewModel

logger = logging.getLogger(__name__)

BACKGROUND_COLOR = QColor("#F7F7F5")
# Scene coordinates are unbounded; the camera decides what is visible
SCENE_EXTENT = 1.0e6


class MindMapScene(QGraphicsScene):
    """Sprites for thoughts and connections, kept in step with a MindMapViewModel."""
    node_tapped = Signal(object)    # thought id, or None for empty space
    node_dragged = Signal(object)   # thought id

    def __init__(self, size: QSizeF | tuple[float, float] = (800.0, 600.0), config: AppConfig | None = None) -> None:
        super().__init__()
        self._config = config or AppConfig()
        self._view_model: Optional[MindMapViewModel] = None

        self._thought_sprites: dict[uuid.UUID, ThoughtNodeSprite] = {}
        self._connection_edges: dict[uuid.UUID, ConnectionEdgeSprite] = {}
        self._selected_node: Optional[ThoughtNodeSprite] = None
        self._dragged_node: Optional[ThoughtNodeSprite] = None

        self._size = QSizeF()
        self.set_size(size)

        self.setBackgroundBrush(BACKGROUND_COLOR)
        self.setSceneRect(QRectF(-SCENE_EXTENT, -SCENE_EXTENT, 2 * SCENE_EXTENT, 2 * SCENE_EXTENT))
        self.setItemIndexMethod(QGraphicsScene.ItemIndexMethod.NoIndex)

    # ------------------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------------------

    @property
    def view_model(self) -> Optional[MindMapViewModel]:
        return self._view_model

    @view_model.setter
    def view_model(self, view_model: Optional[MindMapViewModel]) -> None:
        self._view_model = view_model

    @property
    def size(self) -> QSizeF:
        return QSizeF(self._size)

    def set_size(self, size: QSizeF | tuple[float, float]) -> None:
        """Logical viewport size. Only the spiral origin depends on it."""
        if not isinstance(size, QSizeF):
            size = QSizeF(*size)
        self._size = size

    @property
    def center(self) -> tuple[float, float]:
        return self._size.width() / 2, self._size.height() / 2

    @property
    def selected_node(self) -> Optional[ThoughtNodeSprite]:
        return self._selected_node

    @property
    def dragged_node(self) -> Optional[ThoughtNodeSprite]:
        return self._dragged_node

    @property
    def node_count(self) -> int:
        return len(self._thought_sprites)

    @property
    def edge_count(self) -> int:
        return len(self._connection_edges)

    def thought_sprite(self, thought_id: uuid.UUID) -> Optional[ThoughtNodeSprite]:
        return self._thought_sprites.get(thought_id)

    def connection_edge(self, connection_id: uuid.UUID) -> Optional[ConnectionEdgeSprite]:
        return self._connection_edges.get(connection_id)

    def thought_sprites(self) -> list[ThoughtNodeSprite]:
        return list(self._thought_sprites.values())

    def connection_edges(self) -> list[ConnectionEdgeSprite]:
        return list(self._connection_edges.values())

    # ------------------------------------------------------------------------------
    # Sync with view-model
    # ------------------------------------------------------------------------------

    def sync_with_view_model(self) -> None:
        """Bring the sprites in line with the current view-model state."""
        if self._view_model is None:
            return

        # Nodes first, so edges to brand-new thoughts resolve in the same pass
        self._sync_thought_nodes(self._view_model.thoughts)
        self._sync_connection_edges(self._view_model.connections)

    def _sync_thought_nodes(self, thoughts: list[Thought]) -> None:
        by_id = {t.id: t for t in thoughts}
        diff = reconcile((t.id for t in thoughts), self._thought_sprites.keys())
        if not diff.is_empty:
            logger.debug(f"Thought sync: {diff}")

        for thought_id in diff.added:
            self._add_thought_node(by_id[thought_id])

        for thought_id in diff.removed:
            self._remove_thought_node(thought_id)

        for thought_id in diff.retained:
            thought = by_id[thought_id]
            sprite = self._thought_sprites[thought_id]
            sprite.update_content(thought.content)
            sprite.update_category(thought.category)

    def _sync_connection_edges(self, connections: list[Connection]) -> None:
        by_id = {c.id: c for c in connections}
        diff = reconcile((c.id for c in connections), self._connection_edges.keys())
        if not diff.is_empty:
            logger.debug(f"Connection sync: {diff}")

        # An edge whose endpoint sprite went away (thought deleted) is dropped
        # and re-resolved like a new connection
        for connection_id in diff.retained:
            connection = by_id[connection_id]
            edge = self._connection_edges[connection_id]
            if not self._edge_matches(edge, connection):
                self._remove_connection_edge(connection_id)
                diff.added.append(connection_id)
            else:
                edge.set_strength(connection.strength)

        for connection_id in diff.added:
            self._add_connection_edge(by_id[connection_id])

        for connection_id in diff.removed:
            self._remove_connection_edge(connection_id)

    def _edge_matches(self, edge: ConnectionEdgeSprite, connection: Connection) -> bool:
        return (
            self._thought_sprites.get(connection.source_id) is edge.source
            and self._thought_sprites.get(connection.target_id) is edge.target
        )

    # ------------------------------------------------------------------------------
    # Node management
    # ------------------------------------------------------------------------------

    def _add_thought_node(self, thought: Thought) -> None:
        sprite = ThoughtNodeSprite(thought, self._config)

        if thought.has_stored_position:
            sprite.setPos(QPointF(thought.position_x, thought.position_y))
        else:
            sprite.setPos(QPointF(*self.calculate_new_node_position()))

        self.addItem(sprite)
        self._thought_sprites[thought.id] = sprite
        sprite.animate_in()

    def _remove_thought_node(self, thought_id: uuid.UUID) -> None:
        sprite = self._thought_sprites.pop(thought_id, None)
        if sprite is None:
            return

        if sprite is self._selected_node:
            self._selected_node = None
        if sprite is self._dragged_node:
            self._dragged_node = None

        sprite.animate_out(lambda: self._detach(sprite))

    def _add_connection_edge(self, connection: Connection) -> None:
        source_sprite = self._thought_sprites.get(connection.source_id)
        target_sprite = self._thought_sprites.get(connection.target_id)
        if source_sprite is None or target_sprite is None:
            logger.debug(f"Skipping edge {connection.id}: endpoint not on screen.")
            return

        edge = ConnectionEdgeSprite(
            connection_id=connection.id,
            source=source_sprite,
            target=target_sprite,
            strength=float(connection.strength),
            config=self._config,
        )
        self.addItem(edge)
        self._connection_edges[connection.id] = edge

    def _remove_connection_edge(self, connection_id: uuid.UUID) -> None:
        edge = self._connection_edges.pop(connection_id, None)
        if edge is None:
            return
        edge.animate_out(lambda: self._detach(edge))

    def _detach(self, item) -> None:
        if item.scene() is self:
            self.removeItem(item)

    def calculate_new_node_position(self) -> tuple[float, float]:
        """Next free slot on the spiral around the scene centre."""
        return spiral_position(
            index=len(self._thought_sprites),
            center=self.center,
            spacing=self._config.node_spacing,
            angle_step=self._config.spiral_angle_step,
            radius_step=self._config.spiral_radius_step,
        )

    # ------------------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------------------

    def thought_sprite_at(self, location: QPointF) -> Optional[ThoughtNodeSprite]:
        """Topmost live thought sprite under `location`, ignoring sprites fading out."""
        for item in self.items(location, Qt.ItemSelectionMode.IntersectsItemShape,
                               Qt.SortOrder.DescendingOrder):
            if isinstance(item, ThoughtNodeSprite) and self._thought_sprites.get(item.thought_id) is item:
                return item
        return None

    def select_thought(self, thought_id: Optional[uuid.UUID]) -> None:
        """Reflect an outside selection change without writing back to the view-model."""
        node = self._thought_sprites.get(thought_id) if thought_id is not None else None
        self._set_selected_node(node)

    def _set_selected_node(self, node: Optional[ThoughtNodeSprite]) -> None:
        if self._selected_node is not None and self._selected_node is not node:
            self._selected_node.set_selected(False)
        if node is not None:
            node.set_selected(True)
        self._selected_node = node

    # ------------------------------------------------------------------------------
    # Touch handling
    # ------------------------------------------------------------------------------

    def touches_began(self, location: QPointF) -> None:
        node = self.thought_sprite_at(location)

        if node is not None:
            self._dragged_node = node
            self._set_selected_node(node)
            if self._view_model is not None:
                self._view_model.selected_thought = self._view_model.thought(node.thought_id)
            self.node_tapped.emit(node.thought_id)
        else:
            # Empty space clears the selection
            self._set_selected_node(None)
            if self._view_model is not None:
                self._view_model.selected_thought = None
            self.node_tapped.emit(None)

    def touches_moved(self, location: QPointF) -> None:
        node = self._dragged_node
        if node is None:
            return

        node.setPos(location)
        self._refresh_edges(self._connection_edges.values())

        if self._view_model is not None:
            thought = self._view_model.thought(node.thought_id)
            if thought is not None:
                self._view_model.update_position(thought, location)
        self.node_dragged.emit(node.thought_id)

    def touches_ended(self) -> None:
        self._dragged_node = None

    def touches_cancelled(self) -> None:
        self._dragged_node = None

    # Single touches reach the scene as synthesized mouse events
    def mousePressEvent(self, event: QGraphicsSceneMouseEvent) -> None:
        if event.button() == Qt.MouseButton.LeftButton:
            self.touches_began(event.scenePos())
            event.accept()
            return
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event: QGraphicsSceneMouseEvent) -> None:
        if self._dragged_node is not None and event.buttons() & Qt.MouseButton.LeftButton:
            self.touches_moved(event.scenePos())
            event.accept()
            return
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event: QGraphicsSceneMouseEvent) -> None:
        if event.button() == Qt.MouseButton.LeftButton:
            self.touches_ended()
            event.accept()
            return
        super().mouseReleaseEvent(event)

    # ------------------------------------------------------------------------------
    # Update loop
    # ------------------------------------------------------------------------------

    def update_frame(self) -> None:
        """Called once per frame by the view."""
        self._refresh_edges(self._connection_edges.values())

    @staticmethod
    def _refresh_edges(edges: Iterable[ConnectionEdgeSprite]) -> None:
        for edge in edges:
            edge.update_path()
