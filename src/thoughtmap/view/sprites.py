"""
Scene Sprites
=============
Graphics items for thoughts and connections.

ThoughtNodeSprite is centred on its position, so setPos() places the middle of
the node and scale animations grow from the centre. Edges are straight
segments between the two node centres, drawn underneath the nodes.
"""
from __future__ import annotations

import uuid
from typing import Callable, Optional, TYPE_CHECKING

from PySide6.QtCore import (
    QEasingCurve, QParallelAnimationGroup, QPointF, QPropertyAnimation, QRectF, Qt, QVariantAnimation
)
from PySide6.QtGui import QBrush, QColor, QFont, QFontMetrics, QPainter, QPainterPath, QPen
from PySide6.QtWidgets import QGraphicsItem, QGraphicsObject, QGraphicsPathItem, QStyleOptionGraphicsItem, QWidget

from thoughtmap.config import AppConfig
from thoughtmap.model.entities import ThoughtCategory

if TYPE_CHECKING:
    from thoughtmap.model.entities import Thought

CORNER_RADIUS = 12.0
LABEL_PADDING = 10.0
MAX_LABEL_LINES = 2
BORDER_COLOR = QColor("#3A3F47")
SELECTED_BORDER_COLOR = QColor("#1E88E5")
TEXT_COLOR = QColor("#1B1E23")
EDGE_COLOR = QColor("#6B7380")

Z_EDGE = 0
Z_NODE = 1
Z_NODE_SELECTED = 2


class ThoughtNodeSprite(QGraphicsObject):
    """Rounded card showing one thought, tinted by its category."""

    def __init__(self, thought: Thought, config: AppConfig | None = None) -> None:
        super().__init__()
        self._config = config or AppConfig()
        self.thought_id: uuid.UUID = thought.id
        self._content: str = thought.content
        self._category: ThoughtCategory = thought.category
        self._selected: bool = False
        self._animation: Optional[QParallelAnimationGroup] = None

        self._width = self._config.node_width
        self._height = self._config.node_height
        self._font = QFont()
        self._font.setPointSizeF(10.0)
        self._label = self._wrap_label(self._content)

        self.setZValue(Z_NODE)
        self.setFlag(QGraphicsItem.GraphicsItemFlag.ItemIsSelectable, False)
        self.setToolTip(self._content)

    # ------------------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------------------

    @property
    def content(self) -> str:
        return self._content

    @property
    def category(self) -> ThoughtCategory:
        return self._category

    @property
    def is_selected(self) -> bool:
        return self._selected

    @property
    def is_animating(self) -> bool:
        return self._animation is not None and self._animation.state() == QParallelAnimationGroup.State.Running

    def update_content(self, content: str) -> None:
        if content == self._content:
            return
        self._content = content
        self._label = self._wrap_label(content)
        self.setToolTip(content)
        self.update()

    def update_category(self, category: ThoughtCategory) -> None:
        if category == self._category:
            return
        self._category = category
        self.update()

    def set_selected(self, selected: bool) -> None:
        if selected == self._selected:
            return
        self._selected = selected
        self.setZValue(Z_NODE_SELECTED if selected else Z_NODE)
        self.update()

    def animate_in(self) -> None:
        """Fade in while growing from half size."""
        if not self._config.animations_enabled:
            self.setOpacity(1.0)
            self.setScale(1.0)
            return
        self.setOpacity(0.0)
        self.setScale(self._config.appear_start_scale)
        self._run_animation(
            opacity=1.0,
            scale=1.0,
            duration=self._config.appear_duration_ms,
            easing=QEasingCurve.Type.OutCubic,
        )

    def animate_out(self, on_finished: Callable[[], None]) -> None:
        """Fade out while shrinking, then hand over to `on_finished` for removal."""
        if not self._config.animations_enabled:
            on_finished()
            return
        group = self._run_animation(
            opacity=0.0,
            scale=self._config.appear_start_scale,
            duration=self._config.disappear_duration_ms,
            easing=QEasingCurve.Type.InCubic,
        )
        group.finished.connect(on_finished)

    # ------------------------------------------------------------------------------
    # QGraphicsItem
    # ------------------------------------------------------------------------------

    def boundingRect(self) -> QRectF:
        # Pen is drawn half outside the body
        pad = 2.0
        return QRectF(
            -self._width / 2 - pad, -self._height / 2 - pad,
            self._width + 2 * pad, self._height + 2 * pad,
        )

    def shape(self) -> QPainterPath:
        path = QPainterPath()
        path.addRoundedRect(self._body_rect(), CORNER_RADIUS, CORNER_RADIUS)
        return path

    def paint(self, painter: QPainter, option: QStyleOptionGraphicsItem, widget: Optional[QWidget] = None) -> None:
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)

        fill = QColor(self._category.color)
        if self._selected:
            pen = QPen(SELECTED_BORDER_COLOR, 3.0)
            fill = fill.lighter(110)
        else:
            pen = QPen(BORDER_COLOR, 1.2)

        painter.setPen(pen)
        painter.setBrush(QBrush(fill))
        painter.drawRoundedRect(self._body_rect(), CORNER_RADIUS, CORNER_RADIUS)

        painter.setPen(TEXT_COLOR)
        painter.setFont(self._font)
        text_rect = self._body_rect().adjusted(LABEL_PADDING, LABEL_PADDING / 2, -LABEL_PADDING, -LABEL_PADDING / 2)
        painter.drawText(text_rect, Qt.AlignmentFlag.AlignCenter, self._label)

    # ------------------------------------------------------------------------------
    # Internal methods
    # ------------------------------------------------------------------------------

    def _body_rect(self) -> QRectF:
        return QRectF(-self._width / 2, -self._height / 2, self._width, self._height)

    def _wrap_label(self, text: str) -> str:
        """Greedy word wrap to MAX_LABEL_LINES lines, eliding the last one."""
        metrics = QFontMetrics(self._font)
        max_w = int(self._width - 2 * LABEL_PADDING)
        words = " ".join(text.split()).split(" ")

        lines: list[str] = []
        current = ""
        for i, word in enumerate(words):
            candidate = f"{current} {word}".strip()
            if metrics.horizontalAdvance(candidate) <= max_w or not current:
                current = candidate
                continue
            lines.append(current)
            current = word
            if len(lines) == MAX_LABEL_LINES - 1:
                current = " ".join(words[i:])
                break
        lines.append(current)

        lines = [metrics.elidedText(line, Qt.TextElideMode.ElideRight, max_w) for line in lines]
        return "\n".join(lines)

    def _run_animation(
        self,
        opacity: float,
        scale: float,
        duration: int,
        easing: QEasingCurve.Type,
    ) -> QParallelAnimationGroup:
        if self._animation is not None:
            self._animation.stop()

        group = QParallelAnimationGroup(self)
        for prop, end in ((b"opacity", opacity), (b"scale", scale)):
            anim = QPropertyAnimation(self, prop, group)
            anim.setDuration(duration)
            anim.setEndValue(end)
            anim.setEasingCurve(easing)
            group.addAnimation(anim)

        self._animation = group
        group.start()
        return group


class ConnectionEdgeSprite(QGraphicsPathItem):
    """
    Straight line between two thought sprites.

    Stronger connections are drawn thicker and more opaque.
    """

    def __init__(
        self,
        connection_id: uuid.UUID,
        source: ThoughtNodeSprite,
        target: ThoughtNodeSprite,
        strength: float,
        config: AppConfig | None = None,
    ) -> None:
        super().__init__()
        self._config = config or AppConfig()
        self.connection_id = connection_id
        self.source = source
        self.target = target
        self.strength = strength
        self._fade: Optional[QVariantAnimation] = None

        self.setZValue(Z_EDGE)
        self.setPen(self._pen_for(strength))
        self.setAcceptedMouseButtons(Qt.MouseButton.NoButton)
        self.update_path()

    @staticmethod
    def _pen_for(strength: float) -> QPen:
        color = QColor(EDGE_COLOR)
        color.setAlphaF(0.3 + strength * 0.7)
        pen = QPen(color, 1.0 + strength * 3.0)
        pen.setCapStyle(Qt.PenCapStyle.RoundCap)
        return pen

    def set_strength(self, strength: float) -> None:
        if strength == self.strength:
            return
        self.strength = strength
        self.setPen(self._pen_for(strength))

    def endpoints(self) -> tuple[QPointF, QPointF]:
        return self.source.pos(), self.target.pos()

    def update_path(self) -> None:
        """Re-read both endpoint positions. Hidden while an endpoint is detached."""
        if self.source.scene() is None or self.target.scene() is None:
            self.setVisible(False)
            return
        p1, p2 = self.endpoints()
        path = QPainterPath(p1)
        path.lineTo(p2)
        if path != self.path():
            self.setPath(path)
        self.setVisible(True)

    def animate_out(self, on_finished: Callable[[], None]) -> None:
        if not self._config.animations_enabled:
            on_finished()
            return
        fade = QVariantAnimation()
        fade.setDuration(self._config.disappear_duration_ms)
        fade.setStartValue(self.opacity())
        fade.setEndValue(0.0)
        fade.valueChanged.connect(lambda value: self.setOpacity(float(value)))
        fade.finished.connect(on_finished)
        self._fade = fade
        fade.start()
